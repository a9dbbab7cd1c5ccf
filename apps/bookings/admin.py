from django.contrib import admin
from .models import Booking, Review


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'customer', 'provider', 'scheduled_date', 'total_amount', 'status')
    list_filter = ('status',)
    search_fields = ('customer__email', 'provider__email')


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('booking', 'author_role', 'customer', 'provider', 'rating', 'review_date')
    list_filter = ('author_role', 'rating')
    search_fields = ('customer__email', 'provider__email', 'comment')
