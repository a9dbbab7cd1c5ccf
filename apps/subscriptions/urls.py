from django.urls import path
from . import views

urlpatterns = [
    path('', views.SubscriptionListCreateView.as_view(), name='subscription-list'),
    path('subscribe/', views.SubscribeView.as_view(), name='subscription-subscribe'),
    path('admin-summary/', views.SubscriptionAdminSummaryView.as_view(), name='subscription-admin-summary'),
    path('<int:id>/', views.SubscriptionDetailView.as_view(), name='subscription-detail'),
]

payment_urlpatterns = [
    path('subscription-payment/', views.SubscriptionPaymentView.as_view(), name='subscription-payment'),
    path('user-subscription/', views.UserSubscriptionStatusView.as_view(), name='user-subscription'),
    path('webhook/', views.PaymentWebhookView.as_view(), name='payment-webhook'),
]
