from django.urls import path
from . import views
from apps.bookings.views import (
    ProviderBookingListView, ProviderBookingStatusView, ProviderReviewListView, CustomerReviewListView
)
from apps.subscriptions.views import ProviderSubscriptionView

auth_urlpatterns = [
    path('register/customer/', views.RegisterCustomerView.as_view(), name='register-customer'),
    path('register/provider/', views.RegisterProviderView.as_view(), name='register-provider'),
    path('register/admin/', views.RegisterAdminView.as_view(), name='register-admin'),
    path('login/', views.LoginView.as_view(), name='login'),
    path('logout/', views.LogoutView.as_view(), name='logout'),
]

customer_urlpatterns = [
    path('profile/', views.CustomerProfileView.as_view(), name='customer-profile'),
    path('reviews/', CustomerReviewListView.as_view(), name='customer-reviews'),
]

provider_urlpatterns = [
    path('public/', views.PublicProviderListView.as_view(), name='provider-public-list'),
    path('public/<int:id>/', views.PublicProviderDetailView.as_view(), name='provider-public-detail'),
    path('check-approval/', views.ProviderCheckApprovalView.as_view(), name='provider-check-approval'),
    path('check-approval/<int:id>/', views.PublicProviderApprovalView.as_view(), name='provider-check-approval-public'),
    path('profile/', views.ProviderProfileView.as_view(), name='provider-profile'),
    path('profile/image/', views.ProviderProfileImageView.as_view(), name='provider-profile-image'),
    path('subscription/', ProviderSubscriptionView.as_view(), name='provider-subscription'),
    path('bookings/', ProviderBookingListView.as_view(), name='provider-bookings'),
    path('bookings/<int:id>/status/', ProviderBookingStatusView.as_view(), name='provider-booking-status'),
    path('reviews/', ProviderReviewListView.as_view(), name='provider-reviews'),
]
