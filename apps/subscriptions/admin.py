from django.contrib import admin
from .models import Subscription


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ('user', 'user_type', 'plan_name', 'status', 'payment_status', 'amount', 'end_date')
    list_filter = ('status', 'payment_status', 'plan_name', 'user_type')
    search_fields = ('user__email', 'user__name', 'tx_ref')
