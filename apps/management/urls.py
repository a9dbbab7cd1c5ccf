from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'providers', views.ProviderManagementViewSet, basename='admin-providers')
router.register(r'customers', views.CustomerManagementViewSet, basename='admin-customers')
router.register(r'admins', views.AdminUserViewSet, basename='admin-admins')
router.register(r'subscriptions', views.SubscriptionManagementViewSet, basename='admin-subscriptions')
router.register(r'bookings', views.BookingManagementViewSet, basename='admin-bookings')
router.register(r'reviews', views.ReviewManagementViewSet, basename='admin-reviews')
router.register(r'logs', views.ManagementLogViewSet, basename='admin-logs')

urlpatterns = [
    path('', include(router.urls)),
]
