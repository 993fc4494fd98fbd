from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'quotes'

router = DefaultRouter()
router.register(r'', views.QuoteViewSet, basename='quote')

urlpatterns = [
    # GET    /api/quotes/                 - List own quotes
    # GET    /api/quotes/{id}/            - Quote details with answers
    # POST   /api/quotes/{id}/answers/    - Save answers and re-price
    # POST   /api/quotes/{id}/estimate/   - Re-price from stored answers
    path('', include(router.urls)),
]
