from django.contrib import admin
from .models import Service, PriceList


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'base_price', 'unit', 'is_active')
    list_filter = ('is_active', 'category')
    search_fields = ('name', 'category')


@admin.register(PriceList)
class PriceListAdmin(admin.ModelAdmin):
    list_display = ('service', 'price_type', 'fixed_price', 'unit_price', 'min_price', 'max_price', 'is_active')
    list_filter = ('price_type', 'is_active')
    search_fields = ('service__name', 'description')
