from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    QuoteSerializer,
    QuoteListSerializer,
    QuoteAnswersInputSerializer,
    QuoteEstimateSerializer,
)
from apps.quotes.services import (
    estimate_quote,
    save_quote_answers,
    get_customer_quotes,
    # Exceptions
    QuoteNotFoundError,
    QuoteAccessDeniedError,
    QuoteLockedError,
)


class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


class QuotePagination(PageNumberPagination):
    """Custom pagination for quotes."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class QuoteViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Customer-facing quote endpoints.

    Views are thin HTTP handlers; pricing lives in services.

    list: Get the current customer's quotes
    retrieve: Get one of the current customer's quotes
    answers: Save answers and re-price
    estimate: Re-price from stored answers
    """

    serializer_class = QuoteSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = QuotePagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Return only quotes owned by the requesting customer."""
        return get_customer_quotes(customer=self.request.user)

    def get_serializer_class(self):
        if self.action == 'list':
            return QuoteListSerializer
        return QuoteSerializer

    @extend_schema(
        request=QuoteAnswersInputSerializer,
        responses={200: QuoteSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'])
    def answers(self, request, pk=None):
        """
        Save answers and recompute the estimate.

        POST /api/quotes/{id}/answers/
        Body: {"answers": {"size": "large", "quantity": 60}}
        """
        serializer = QuoteAnswersInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            quote = save_quote_answers(
                quote_id=pk,
                customer=request.user,
                answers=serializer.validated_data['answers']
            )
        except QuoteNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except QuoteAccessDeniedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except QuoteLockedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(QuoteSerializer(quote).data)

    @extend_schema(
        request=None,
        responses={200: QuoteEstimateSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'])
    def estimate(self, request, pk=None):
        """
        Recompute the estimate subtotal from stored answers.

        POST /api/quotes/{id}/estimate/
        """
        try:
            subtotal = estimate_quote(quote_id=pk, customer=request.user)
        except QuoteNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except QuoteAccessDeniedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        output = QuoteEstimateSerializer({'quote_id': pk, 'subtotal': subtotal})
        return Response(output.data)
