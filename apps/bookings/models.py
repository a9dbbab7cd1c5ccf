from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone
from core.constants import BOOKING_STATUS_CHOICES, REVIEW_AUTHOR_CHOICES


class Booking(models.Model):
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='customer_bookings')
    provider = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='provider_bookings')
    service = models.ForeignKey('catalog.Service', on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings')
    scheduled_date = models.DateTimeField()
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    notes = models.TextField(blank=True, default='')
    status = models.CharField(max_length=10, choices=BOOKING_STATUS_CHOICES, default='Pending')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Booking {self.id}: {self.customer.email} -> {self.provider.email} ({self.status})"

    @property
    def is_closed(self):
        return self.status in ('Completed', 'Cancelled')


class Review(models.Model):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='reviews')
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='customer_reviews')
    provider = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='provider_reviews')
    author_role = models.CharField(max_length=10, choices=REVIEW_AUTHOR_CHOICES)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField()
    review_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('booking', 'author_role')
        ordering = ['-review_date']

    def __str__(self):
        return f"Review {self.id} by {self.author_role} on booking {self.booking_id}: {self.rating}/5"

    @property
    def author(self):
        return self.customer if self.author_role == 'customer' else self.provider
