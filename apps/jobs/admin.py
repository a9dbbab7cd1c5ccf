from django.contrib import admin
from .models import JobPost, JobApplication, WorkPost


class JobApplicationInline(admin.TabularInline):
    model = JobApplication
    extra = 0


@admin.register(JobPost)
class JobPostAdmin(admin.ModelAdmin):
    list_display = ('title', 'customer', 'service', 'job_status', 'assigned_provider', 'created_at')
    list_filter = ('job_status',)
    search_fields = ('title', 'description', 'customer__email')
    inlines = [JobApplicationInline]


@admin.register(WorkPost)
class WorkPostAdmin(admin.ModelAdmin):
    list_display = ('title', 'provider', 'category', 'job_post', 'is_public', 'completed_at')
    list_filter = ('is_public', 'category')
    search_fields = ('title', 'description', 'provider__email')
