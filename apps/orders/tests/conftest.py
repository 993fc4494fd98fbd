import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.catalog.models import Service
from apps.orders.models import Order, Payment, PaymentStatus
from apps.quotes.models import Quote


def client_for(user):
    """API client authenticated with a JWT for ``user``."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return a shop staff member."""
    return User.objects.create_user(
        email='staff@printshop.example',
        password='TestPass123!',
        name='Front Desk',
        role=UserRole.STAFF,
    )


@pytest.fixture
def customer(db):
    """Create and return a customer."""
    return User.objects.create_user(
        email='customer@example.com',
        password='TestPass123!',
        name='Customer',
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        name='Other Customer',
    )


@pytest.fixture
def staff_client(staff_user):
    return client_for(staff_user)


@pytest.fixture
def customer_client(customer):
    return client_for(customer)


@pytest.fixture
def other_client(other_customer):
    return client_for(other_customer)


@pytest.fixture
def service(db):
    return Service.objects.create(name='Vinyl Banner', slug='vinyl-banner')


@pytest.fixture
def quote(db, customer, service):
    """Requested quote with a stored estimate."""
    return Quote.objects.create(
        customer=customer,
        service=service,
        estimate_subtotal=Decimal('180.00'),
    )


@pytest.fixture
def order(db, customer, service):
    """Unpaid order for 200.00."""
    return Order.objects.create(
        order_number='ORD-2024-0001',
        customer=customer,
        service=service,
        subtotal=Decimal('200.00'),
        total_amount=Decimal('200.00'),
        balance_due=Decimal('200.00'),
    )


@pytest.fixture
def completed_payment(db, order):
    """A completed 50.00 payment (balance not yet reconciled)."""
    return Payment.objects.create(
        order=order,
        amount=Decimal('50.00'),
        status=PaymentStatus.COMPLETED,
    )
