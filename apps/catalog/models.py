from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from core.constants import PRICE_TYPE_CHOICES, PRICE_UNIT_CHOICES


class Service(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default='')
    category = models.CharField(max_length=100, blank=True, default='')
    base_price = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    unit = models.CharField(max_length=20, choices=PRICE_UNIT_CHOICES, default='hour')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


def validate_price_fields(price_type, fixed_price=None, unit_price=None, min_price=None, max_price=None):
    """Return {field: message} for the price fields ``price_type`` needs but lacks."""
    errors = {}
    if price_type == 'fixed' and fixed_price is None:
        errors['fixed_price'] = "Fixed price is required for fixed price type"
    elif price_type == 'per_unit' and unit_price is None:
        errors['unit_price'] = "Unit price is required for per_unit price type"
    elif price_type == 'range':
        if min_price is None or max_price is None:
            errors['min_price'] = "Min and max prices are required for range price type"
        elif min_price > max_price:
            errors['min_price'] = "Min price cannot be greater than max price"
    return errors


class PriceList(models.Model):
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name='price_lists')
    price_type = models.CharField(max_length=10, choices=PRICE_TYPE_CHOICES)
    fixed_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    unit = models.CharField(max_length=20, choices=PRICE_UNIT_CHOICES, default='hour')
    min_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    max_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['service', 'is_active'])]

    def __str__(self):
        return f"{self.service.name} ({self.price_type})"

    def clean(self):
        errors = validate_price_fields(
            self.price_type, self.fixed_price, self.unit_price, self.min_price, self.max_price
        )
        if errors:
            raise ValidationError(errors)

    @property
    def display_price(self):
        if self.price_type == 'fixed':
            return f"{self.fixed_price}"
        if self.price_type == 'per_unit':
            return f"{self.unit_price} per {self.unit}"
        return f"{self.min_price} - {self.max_price}"
