from django.urls import path
from . import views

booking_urlpatterns = [
    path('', views.BookingListCreateView.as_view(), name='booking-list'),
    path('<int:id>/', views.BookingDetailView.as_view(), name='booking-detail'),
    path('<int:id>/cancel/', views.BookingCancelView.as_view(), name='booking-cancel'),
]

review_urlpatterns = [
    path('', views.ReviewListCreateView.as_view(), name='review-list'),
    path('<int:id>/', views.ReviewDetailView.as_view(), name='review-detail'),
]
