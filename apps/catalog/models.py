from django.db import models
import uuid


class Service(models.Model):
    """A sellable print/signage service (banners, business cards, ...)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'services'
        ordering = ['name']

    def __str__(self):
        return self.name


class Tier(models.Model):
    """Service package level (Basic / Standard / Premium)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'tiers'
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class OptionFieldType(models.TextChoices):
    TEXT = 'TEXT', 'Text'
    NUMBER = 'NUMBER', 'Number'
    SELECT = 'SELECT', 'Select'
    CHECKBOX = 'CHECKBOX', 'Checkbox'


class ServiceOption(models.Model):
    """
    A question asked when quoting a service.

    ``pricing_impact`` maps a stringified answer to a monetary delta,
    e.g. ``{"large": 10, "xl": 25}``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    service = models.ForeignKey(
        Service,
        on_delete=models.CASCADE,
        related_name='options'
    )
    key = models.CharField(max_length=100)
    label = models.CharField(max_length=200)
    field_type = models.CharField(
        max_length=20,
        choices=OptionFieldType.choices,
        default=OptionFieldType.SELECT
    )
    is_required = models.BooleanField(default=False)
    choices = models.JSONField(default=list, blank=True)
    pricing_impact = models.JSONField(default=dict, blank=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'service_options'
        unique_together = [['service', 'key']]
        ordering = ['sort_order', 'key']

    def __str__(self):
        return f"{self.service.name}: {self.key}"


class PricingRuleType(models.TextChoices):
    VOLUME_DISCOUNT = 'VOLUME_DISCOUNT', 'Volume discount'
    RUSH_FEE = 'RUSH_FEE', 'Rush fee'
    SEASONAL_PROMOTION = 'SEASONAL_PROMOTION', 'Seasonal promotion'
    CUSTOM = 'CUSTOM', 'Custom'


class PricingRule(models.Model):
    """
    Pricing adjustment rule. A null ``service`` applies to every service.

    VOLUME_DISCOUNT ``rule_config``::

        {"thresholds": [{"min_qty": 10, "discount_pct": 5},
                        {"min_qty": 50, "discount_pct": 15}]}
    """

    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=200, blank=True)
    service = models.ForeignKey(
        Service,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='pricing_rules'
    )
    rule_type = models.CharField(max_length=30, choices=PricingRuleType.choices)
    rule_config = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pricing_rules'
        ordering = ['id']
        indexes = [
            models.Index(fields=['is_active', 'service'], name='pricing_rules_active_svc_idx'),
        ]

    def __str__(self):
        scope = self.service.name if self.service else 'All services'
        return f"{self.get_rule_type_display()} ({scope})"
