from django.contrib import admin
from .models import User, Customer, Provider


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'phone_number', 'role', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'name', 'phone_number')


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('user', 'address', 'created_at')
    search_fields = ('user__email', 'user__name')


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = ('user', 'experience_years', 'availability_status', 'rating', 'is_approved')
    list_filter = ('is_approved', 'availability_status')
    search_fields = ('user__email', 'user__name')
