from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'orders'

# Note: payments and purchase-orders must be registered BEFORE empty prefix
router = DefaultRouter()
router.register(r'payments', views.PaymentViewSet, basename='payment')
router.register(r'purchase-orders', views.PurchaseOrderViewSet, basename='purchase-order')
router.register(r'', views.OrderViewSet, basename='order')

urlpatterns = [
    # Order ViewSet routes
    # GET    /api/orders/                   - List orders
    # GET    /api/orders/{id}/              - Order details
    # POST   /api/orders/from_quote/        - Convert quote to order (staff)
    # POST   /api/orders/{id}/reconcile/    - Recompute balance due (staff)
    # GET    /api/orders/{id}/payments/     - List payments
    # POST   /api/orders/{id}/payments/     - Record payment (staff)
    # POST   /api/orders/{id}/invoice/      - Issue invoice (staff)

    # Payment routes (staff)
    # POST   /api/orders/payments/{id}/status/  - Change pending payment status
    # POST   /api/orders/payments/{id}/refund/  - Refund completed payment

    # Purchase order routes (staff)
    # GET    /api/orders/purchase-orders/       - List purchase orders
    # POST   /api/orders/purchase-orders/       - Create purchase order
    # GET    /api/orders/purchase-orders/{id}/  - Purchase order details
    path('', include(router.urls)),
]
