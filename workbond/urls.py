from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from apps.users.urls import auth_urlpatterns, customer_urlpatterns, provider_urlpatterns
from apps.catalog.urls import service_urlpatterns, price_list_urlpatterns
from apps.bookings.urls import booking_urlpatterns, review_urlpatterns
from apps.jobs.urls import job_post_urlpatterns, work_post_urlpatterns
from apps.subscriptions.urls import payment_urlpatterns

schema_view = get_schema_view(
    openapi.Info(
        title="WorkBond API",
        default_version='v1',
        description="API for the WorkBond service marketplace",
    ),
    public=True,
)

urlpatterns = [
    path('', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('django-admin/', admin.site.urls),
    path('api/auth/', include(auth_urlpatterns)),
    path('api/customers/', include(customer_urlpatterns)),
    path('api/providers/', include(provider_urlpatterns)),
    path('api/services/', include(service_urlpatterns)),
    path('api/price-lists/', include(price_list_urlpatterns)),
    path('api/bookings/', include(booking_urlpatterns)),
    path('api/reviews/', include(review_urlpatterns)),
    path('api/job-posts/', include(job_post_urlpatterns)),
    path('api/work-posts/', include(work_post_urlpatterns)),
    path('api/subscriptions/', include('apps.subscriptions.urls')),
    path('api/payments/', include(payment_urlpatterns)),
    path('api/notifications/', include('apps.notifications.urls')),
    path('api/admin/', include('apps.management.urls')),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
