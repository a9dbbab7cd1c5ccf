from django.db import models
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator, MaxValueValidator
from core.constants import ROLE_CHOICES, AVAILABILITY_CHOICES


class User(AbstractUser):
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    phone_number = models.CharField(max_length=15, blank=True, null=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='customer')
    current_subscription = models.ForeignKey(
        'subscriptions.Subscription',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    @property
    def is_customer(self):
        return self.role == 'customer' and hasattr(self, 'customer')

    @property
    def is_provider(self):
        return self.role == 'provider' and hasattr(self, 'provider')

    @property
    def is_admin(self):
        return self.role == 'admin' or self.is_superuser

    @staticmethod
    def get_by_email(email):
        return User.objects.filter(email__iexact=(email or '').strip()).first()

    def __str__(self):
        return f"{self.name or self.username} ({self.role})"


class Customer(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='customer')
    address = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Customer: {self.user.email}"


class Provider(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='provider')
    address = models.CharField(max_length=255)
    experience_years = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    skills = models.JSONField(default=list)
    availability_status = models.CharField(max_length=20, choices=AVAILABILITY_CHOICES, default='Available')
    rating = models.FloatField(default=0, validators=[MinValueValidator(0), MaxValueValidator(5)])
    profile_image = models.ImageField(upload_to='profile_pics/', blank=True, null=True)
    is_approved = models.BooleanField(default=False)
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-rating', '-created_at']

    @property
    def approval_status(self):
        return 'Approved' if self.is_approved else 'Pending'

    def update_rating(self):
        """Recalculate rating from the reviews customers left for this provider."""
        ratings = list(
            self.user.provider_reviews.filter(author_role='customer').values_list('rating', flat=True)
        )
        self.rating = round(sum(ratings) / len(ratings), 1) if ratings else 0
        self.save(update_fields=['rating', 'updated_at'])
        return self.rating

    def __str__(self):
        return f"Provider: {self.user.email}"
