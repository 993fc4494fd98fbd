from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import uuid


class UserRole(models.TextChoices):
    CUSTOMER = 'CUSTOMER', 'Customer'
    STAFF = 'STAFF', 'Staff'
    ADMIN = 'ADMIN', 'Admin'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Custom user model with email authentication."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    name = models.CharField(max_length=150, blank=True)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CUSTOMER
    )

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email'], name='users_email_idx'),
            models.Index(fields=['role'], name='users_role_idx'),
        ]

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return name or email prefix."""
        return self.name or self.email.split('@')[0]

    @property
    def is_shop_staff(self):
        """Staff and admins run orders, payments and invoices."""
        return self.is_staff or self.role in (UserRole.STAFF, UserRole.ADMIN)


class B2BAccountStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    SUSPENDED = 'SUSPENDED', 'Suspended'
    CLOSED = 'CLOSED', 'Closed'


class B2BAccount(models.Model):
    """Business customer account with negotiated pricing."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company_name = models.CharField(max_length=255)
    main_contact = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='b2b_accounts_contact'
    )
    status = models.CharField(
        max_length=20,
        choices=B2BAccountStatus.choices,
        default=B2BAccountStatus.ACTIVE
    )

    # Flat discount applied when no contract pricing exists for a service
    discount_pct = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'b2b_accounts'
        ordering = ['company_name']

    def __str__(self):
        return self.company_name


class ContractPricing(models.Model):
    """
    Per-account, per-service price overrides.

    ``pricing_json`` maps a tier id to its overrides::

        {"<tier_id>": {"base_price": 100,
                       "quantity_breaks": {"10": 80},
                       "quantity_pricing": {"10": 90}}}
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        B2BAccount,
        on_delete=models.CASCADE,
        related_name='contract_pricing'
    )
    service = models.ForeignKey(
        'catalog.Service',
        on_delete=models.CASCADE,
        related_name='contract_pricing'
    )
    pricing_json = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contract_pricing'
        unique_together = [['account', 'service']]

    def __str__(self):
        return f"{self.account} / {self.service}"


class CustomerProfile(models.Model):
    """Customer details, including the optional link to a B2B account."""

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='customer_profile'
    )
    phone = models.CharField(max_length=50, blank=True)
    company_name = models.CharField(max_length=255, blank=True)
    b2b_account = models.ForeignKey(
        B2BAccount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='customers'
    )

    class Meta:
        db_table = 'customer_profiles'

    def __str__(self):
        return f"Profile: {self.user.email}"
