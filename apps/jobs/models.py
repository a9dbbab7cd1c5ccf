from django.db import models
from django.conf import settings
from django.utils import timezone
from core.constants import JOB_STATUS_CHOICES, JOB_APPLICATION_STATUS_CHOICES


class JobPost(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField()
    duration = models.CharField(max_length=100)  # e.g. "2 weeks", "3 days", "Contract-based"
    service = models.ForeignKey('catalog.Service', on_delete=models.SET_NULL, null=True, related_name='job_posts')
    location = models.CharField(max_length=255, blank=True, default='')
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='job_posts')
    job_status = models.CharField(max_length=20, choices=JOB_STATUS_CHOICES, default='open')
    assigned_provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_job_posts'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.job_status})"

    def can_accept_applications(self):
        return self.job_status == 'open'

    def approved_application_for(self, provider):
        return self.applications.filter(provider=provider, status='approved').first()

    def can_be_completed_by(self, provider):
        return self.job_status == 'in_progress' and self.approved_application_for(provider) is not None

    def mark_as_completed(self):
        self.job_status = 'completed'
        self.save()


class JobApplication(models.Model):
    job_post = models.ForeignKey(JobPost, on_delete=models.CASCADE, related_name='applications')
    provider = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='job_applications')
    status = models.CharField(max_length=20, choices=JOB_APPLICATION_STATUS_CHOICES, default='applied')
    applied_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('job_post', 'provider')
        ordering = ['-applied_at']

    def __str__(self):
        return f"{self.provider.email} -> {self.job_post.title} ({self.status})"


class WorkPost(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    before_image = models.ImageField(upload_to='work_posts/before/')
    after_image = models.ImageField(upload_to='work_posts/after/')
    category = models.CharField(max_length=100, blank=True, default='')
    provider = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='work_posts')
    job_post = models.ForeignKey(JobPost, on_delete=models.SET_NULL, null=True, blank=True, related_name='work_posts')
    service = models.ForeignKey('catalog.Service', on_delete=models.SET_NULL, null=True, blank=True, related_name='work_posts')
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='received_work_posts'
    )
    completed_at = models.DateTimeField(default=timezone.now)
    customer_feedback = models.TextField(blank=True, default='')
    is_public = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['provider', 'is_public']),
            models.Index(fields=['category']),
        ]

    def __str__(self):
        return f"{self.title} by {self.provider.email}"

    def is_visible_to(self, user):
        if self.is_public:
            return True
        return user.is_authenticated and (user.id == self.provider_id or user.is_admin)
