from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone
from core.constants import (
    SUBSCRIPTION_USER_TYPE_CHOICES, SUBSCRIPTION_PLAN_CHOICES,
    SUBSCRIPTION_STATUS_CHOICES, PAYMENT_STATUS_CHOICES
)


class Subscription(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='subscriptions')
    user_type = models.CharField(max_length=10, choices=SUBSCRIPTION_USER_TYPE_CHOICES)
    plan_name = models.CharField(max_length=20, choices=SUBSCRIPTION_PLAN_CHOICES, default='Free')
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField()
    renewal_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=SUBSCRIPTION_STATUS_CHOICES, default='Active')
    amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default='pending')
    tx_ref = models.CharField(max_length=100, unique=True, null=True, blank=True)
    gateway_reference = models.CharField(max_length=100, blank=True, default='')
    checkout_url = models.URLField(max_length=500, blank=True, default='')
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.plan_name} subscription for {self.user.email} ({self.status}/{self.payment_status})"

    @property
    def is_current(self):
        return (
            self.status == 'Active'
            and self.payment_status == 'paid'
            and self.end_date > timezone.now()
        )

    def save(self, *args, **kwargs):
        if self.status == 'Active' and self.end_date and self.end_date <= timezone.now():
            self.status = 'Expired'
        super().save(*args, **kwargs)

    def mark_as_paid(self, gateway_reference=None):
        """Activate the subscription and make it the owner's current one."""
        self.payment_status = 'paid'
        self.status = 'Active'
        self.paid_at = timezone.now()
        if gateway_reference:
            self.gateway_reference = str(gateway_reference)
        self.save()
        if self.is_current:
            self.user.current_subscription = self
            self.user.save(update_fields=['current_subscription'])
