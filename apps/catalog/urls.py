from django.urls import path
from . import views

service_urlpatterns = [
    path('', views.ServiceListCreateView.as_view(), name='service-list'),
    path('<int:id>/', views.ServiceDetailView.as_view(), name='service-detail'),
    path('<int:id>/providers/', views.ServiceProvidersView.as_view(), name='service-providers'),
]

price_list_urlpatterns = [
    path('', views.PriceListListCreateView.as_view(), name='price-list-list'),
    path('service/<int:service_id>/', views.PriceListByServiceView.as_view(), name='price-list-by-service'),
    path('<int:id>/', views.PriceListDetailView.as_view(), name='price-list-detail'),
]
