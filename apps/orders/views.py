from rest_framework import viewsets, mixins, status, serializers as drf_serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import Payment, PurchaseOrder
from .serializers import (
    OrderSerializer,
    OrderListSerializer,
    OrderBalanceSerializer,
    PaymentSerializer,
    InvoiceSerializer,
    PurchaseOrderSerializer,
    # Input serializers
    CreateOrderFromQuoteInputSerializer,
    RecordPaymentInputSerializer,
    PaymentStatusInputSerializer,
    RefundInputSerializer,
)
from .permissions import IsShopStaff, IsOrderCustomerOrStaff

from apps.orders.services import (
    create_order_from_quote,
    get_orders_for_user,
    get_order_for_user,
    reconcile_order_balance,
    record_payment,
    update_payment_status,
    refund_payment,
    issue_invoice,
    create_purchase_order,
    # Exceptions
    OrderNotFoundError,
    OrderAccessDeniedError,
    QuoteNotConvertibleError,
    PaymentNotFoundError,
    InvalidPaymentError,
    InvalidStatusTransitionError,
    InvalidPurchaseOrderError,
    DocumentNumberConflictError,
)
from apps.quotes.services import QuoteNotFoundError


class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


def _number_conflict_response(error):
    return Response({'error': str(error)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class OrderPagination(PageNumberPagination):
    """Custom pagination for orders."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Order endpoints.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Orders visible to the user (own orders, or all for staff)
    retrieve: Order details
    from_quote: Convert a quote into an order (staff)
    reconcile: Recompute balance due from payments (staff)
    payments: List (owner/staff) or record (staff) payments
    invoice: Issue an invoice (staff)
    """

    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, IsOrderCustomerOrStaff]
    pagination_class = OrderPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        return get_orders_for_user(user=self.request.user)

    def get_serializer_class(self):
        if self.action == 'list':
            return OrderListSerializer
        return OrderSerializer

    def get_permissions(self):
        """Staff only for anything that moves money or numbers."""
        if self.action in ['from_quote', 'reconcile', 'invoice']:
            return [IsAuthenticated(), IsShopStaff()]
        if self.action == 'payments' and self.request.method == 'POST':
            return [IsAuthenticated(), IsShopStaff()]
        return super().get_permissions()

    @extend_schema(
        request=CreateOrderFromQuoteInputSerializer,
        responses={201: OrderSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['post'])
    def from_quote(self, request):
        """
        Convert a quote into an order.

        POST /api/orders/from_quote/
        Body: {"quote_id": "...", "total_amount": "120.00"}
        """
        serializer = CreateOrderFromQuoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = create_order_from_quote(
                quote_id=serializer.validated_data['quote_id'],
                total_amount=serializer.validated_data.get('total_amount')
            )
        except QuoteNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except QuoteNotConvertibleError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except DocumentNumberConflictError as e:
            return _number_conflict_response(e)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: OrderBalanceSerializer, 404: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def reconcile(self, request, pk=None):
        """
        Recompute balance due from the full payment history.

        POST /api/orders/{id}/reconcile/
        """
        try:
            order = reconcile_order_balance(order_id=pk)
        except OrderNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(OrderBalanceSerializer(order).data)

    @extend_schema(
        methods=['GET'],
        responses={200: PaymentSerializer(many=True)},
    )
    @extend_schema(
        methods=['POST'],
        request=RecordPaymentInputSerializer,
        responses={201: PaymentSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['get', 'post'])
    def payments(self, request, pk=None):
        """
        List or record payments.

        GET  /api/orders/{id}/payments/
        POST /api/orders/{id}/payments/
        Body: {"amount": "50.00", "method": "CARD", "status": "COMPLETED"}
        """
        if request.method == 'GET':
            try:
                order = get_order_for_user(order_id=pk, user=request.user)
            except OrderNotFoundError as e:
                return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
            except OrderAccessDeniedError as e:
                return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
            return Response(PaymentSerializer(order.payments.all(), many=True).data)

        serializer = RecordPaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = record_payment(
                order_id=pk,
                recorded_by=request.user,
                **serializer.validated_data
            )
        except OrderNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPaymentError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={201: InvoiceSerializer, 404: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def invoice(self, request, pk=None):
        """
        Issue an invoice for the order.

        POST /api/orders/{id}/invoice/
        """
        try:
            invoice = issue_invoice(order_id=pk)
        except OrderNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except DocumentNumberConflictError as e:
            return _number_conflict_response(e)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class PaymentViewSet(viewsets.GenericViewSet):
    """
    Staff-only payment mutations.

    status: Complete / fail / cancel a pending payment
    refund: Refund (part of) a completed payment
    """

    queryset = Payment.objects.all()
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsShopStaff]
    lookup_value_regex = '[0-9a-f-]{36}'

    @extend_schema(
        request=PaymentStatusInputSerializer,
        responses={200: PaymentSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'], url_path='status', url_name='status')
    def change_status(self, request, pk=None):
        """
        POST /api/orders/payments/{id}/status/
        Body: {"status": "COMPLETED"}
        """
        serializer = PaymentStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = update_payment_status(
                payment_id=pk,
                status=serializer.validated_data['status']
            )
        except PaymentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidStatusTransitionError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PaymentSerializer(payment).data)

    @extend_schema(
        request=RefundInputSerializer,
        responses={201: PaymentSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        """
        POST /api/orders/payments/{id}/refund/
        Body: {"amount": "20.00", "reason": "Misprint"}
        """
        serializer = RefundInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            refund = refund_payment(
                payment_id=pk,
                amount=serializer.validated_data.get('amount'),
                reason=serializer.validated_data['reason'],
                refunded_by=request.user
            )
        except PaymentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPaymentError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PaymentSerializer(refund).data, status=status.HTTP_201_CREATED)


class PurchaseOrderViewSet(mixins.ListModelMixin,
                           mixins.CreateModelMixin,
                           mixins.RetrieveModelMixin,
                           viewsets.GenericViewSet):
    """Staff-only supplier purchase orders."""

    queryset = PurchaseOrder.objects.select_related('created_by')
    serializer_class = PurchaseOrderSerializer
    permission_classes = [IsAuthenticated, IsShopStaff]
    pagination_class = OrderPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def create(self, request, *args, **kwargs):
        """Create a purchase order with the next PO number."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            purchase_order = create_purchase_order(
                supplier_name=serializer.validated_data['supplier_name'],
                total_cost=serializer.validated_data['total_cost'],
                notes=serializer.validated_data.get('notes', ''),
                created_by=request.user
            )
        except InvalidPurchaseOrderError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except DocumentNumberConflictError as e:
            return _number_conflict_response(e)

        output_serializer = PurchaseOrderSerializer(purchase_order)
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)
