import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, B2BAccount, ContractPricing, CustomerProfile
from apps.catalog.models import Service, ServiceOption, Tier, PricingRule, PricingRuleType
from apps.quotes.models import Quote


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def customer(db):
    """Create and return a retail customer."""
    return User.objects.create_user(
        email='customer@example.com',
        password='TestPass123!',
        name='Retail Customer',
    )


@pytest.fixture
def other_customer(db):
    """Create and return a customer who owns nothing."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        name='Other Customer',
    )


@pytest.fixture
def customer_client(api_client, customer):
    """API client authenticated as the customer via JWT."""
    refresh = RefreshToken.for_user(customer)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def other_client(other_customer):
    """API client authenticated as the other customer."""
    client = APIClient()
    refresh = RefreshToken.for_user(other_customer)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def banner_service(db):
    """Banner printing service with size and quantity options."""
    service = Service.objects.create(name='Vinyl Banner', slug='vinyl-banner')
    ServiceOption.objects.create(
        service=service,
        key='size',
        label='Size',
        pricing_impact={'small': 5, 'large': 10, 'xl': 25},
        sort_order=1,
    )
    ServiceOption.objects.create(
        service=service,
        key='quantity',
        label='Quantity',
        field_type='NUMBER',
        pricing_impact={'10': 40, '60': 200},
        sort_order=2,
    )
    return service


@pytest.fixture
def standard_tier(db):
    return Tier.objects.create(name='Standard', slug='standard', sort_order=2)


@pytest.fixture
def volume_rule(db, banner_service):
    """10% off from 50 units for the banner service."""
    return PricingRule.objects.create(
        name='Banner volume',
        service=banner_service,
        rule_type=PricingRuleType.VOLUME_DISCOUNT,
        rule_config={'thresholds': [
            {'min_qty': 10, 'discount_pct': 5},
            {'min_qty': 50, 'discount_pct': 10},
        ]},
    )


@pytest.fixture
def quote(db, customer, banner_service, standard_tier):
    """Requested quote for the banner service."""
    return Quote.objects.create(
        customer=customer,
        service=banner_service,
        tier=standard_tier,
    )


@pytest.fixture
def b2b_account(db):
    return B2BAccount.objects.create(
        company_name='Acme Signs Ltd',
        discount_pct=Decimal('10.00'),
    )


@pytest.fixture
def b2b_customer(db, customer, b2b_account):
    """Attach the customer to the B2B account."""
    CustomerProfile.objects.create(user=customer, b2b_account=b2b_account)
    return customer


@pytest.fixture
def contract(db, b2b_account, banner_service, standard_tier):
    """Contract with a fixed base price for the standard tier."""
    return ContractPricing.objects.create(
        account=b2b_account,
        service=banner_service,
        pricing_json={str(standard_tier.id): {'base_price': 150}},
    )
