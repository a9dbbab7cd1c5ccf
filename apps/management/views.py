import logging
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import viewsets, mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from core.query import query_helper
from core.utils import IsAdmin, api_response, error_response
from apps.users.models import Provider, Customer
from apps.users.serializers import UserSerializer, ProviderProfileSerializer, CustomerProfileSerializer
from apps.subscriptions.models import Subscription
from apps.subscriptions.serializers import SubscriptionSerializer
from apps.bookings.models import Booking, Review
from apps.bookings.serializers import BookingSerializer, ReviewSerializer
from apps.notifications.utils import notify, send_approval_email, send_rejection_email
from .models import ManagementLog
from .serializers import ManagementLogSerializer, ProviderRejectSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


class AdminListMixin:
    """list/retrieve through the shared query helper and response envelope."""
    query_search_fields = ()
    query_price_field = None
    query_rating_field = None
    query_default_sort = '-created_at'

    def list(self, request, *args, **kwargs):
        items, pagination = query_helper(
            self.get_queryset(),
            request.query_params,
            search_fields=self.query_search_fields,
            price_field=self.query_price_field,
            rating_field=self.query_rating_field,
            default_sort=self.query_default_sort,
        )
        return api_response(self.get_serializer(items, many=True).data, pagination=pagination)

    def retrieve(self, request, *args, **kwargs):
        return api_response(self.get_serializer(self.get_object()).data)


class ProfileDeleteMixin(mixins.DestroyModelMixin):

    def destroy(self, request, *args, **kwargs):
        profile = self.get_object()
        user = profile.user
        email = user.email
        user.delete()
        ManagementLog.objects.create(
            admin=request.user,
            action=f'delete_{user.role}',
            details=f"Deleted {user.role} {email}"
        )
        logger.info(f"Admin {request.user.id} deleted {user.role} {email}")
        return api_response(message=f"{user.role.capitalize()} deleted successfully")


class ProviderManagementViewSet(AdminListMixin, ProfileDeleteMixin, viewsets.ReadOnlyModelViewSet):
    """
    Admin API for provider accounts: listing, approval workflow and removal.
    Providers are addressed by their user id.
    """
    queryset = Provider.objects.select_related('user')
    serializer_class = ProviderProfileSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    lookup_field = 'user_id'
    lookup_url_kwarg = 'pk'
    query_search_fields = ('user__name', 'user__email', 'user__phone_number', 'address')
    query_rating_field = 'rating'

    @action(detail=False, methods=['get'])
    def pending(self, request):
        items, pagination = query_helper(
            self.get_queryset(),
            request.query_params,
            search_fields=self.query_search_fields,
            default_filters={'is_approved': False},
            price_field=None,
        )
        return api_response(self.get_serializer(items, many=True).data, pagination=pagination)

    @action(detail=True, methods=['put', 'patch'])
    def approve(self, request, pk=None):
        provider = self.get_object()
        if provider.is_approved:
            return error_response("Provider is already approved")
        provider.is_approved = True
        provider.approved_at = timezone.now()
        provider.save()

        ManagementLog.objects.create(
            admin=request.user,
            action='approve_provider',
            details=f"Approved provider {provider.user.email}"
        )
        notify(provider.user, "Your provider account has been approved.", 'success')
        email_sent = send_approval_email(provider.user)
        logger.info(f"Provider {provider.user_id} approved by admin {request.user.id}")
        return api_response(
            self.get_serializer(provider).data,
            message="Provider approved successfully",
            emailSent=email_sent
        )

    @swagger_auto_schema(methods=['put', 'patch'], request_body=ProviderRejectSerializer)
    @action(detail=True, methods=['put', 'patch'])
    def reject(self, request, pk=None):
        provider = self.get_object()
        serializer = ProviderRejectSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Validation failed", errors=serializer.errors)
        reason = serializer.validated_data.get('reason') or None

        provider.is_approved = False
        provider.approved_at = None
        provider.save()

        ManagementLog.objects.create(
            admin=request.user,
            action='reject_provider',
            details=f"Rejected provider {provider.user.email}" + (f": {reason}" if reason else "")
        )
        notify(provider.user, "Your provider application was not approved.", 'error')
        email_sent = send_rejection_email(provider.user, reason)
        if reason:
            message = f"Provider rejected successfully. Reason: {reason}"
        else:
            message = "Provider rejected successfully. The provider can no longer access provider features."
        return api_response(
            {'provider': self.get_serializer(provider).data, 'rejectionReason': reason},
            message=message,
            emailSent=email_sent
        )


class CustomerManagementViewSet(AdminListMixin, ProfileDeleteMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Customer.objects.select_related('user')
    serializer_class = CustomerProfileSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    lookup_field = 'user_id'
    lookup_url_kwarg = 'pk'
    query_search_fields = ('user__name', 'user__email', 'user__phone_number', 'address')


class AdminUserViewSet(AdminListMixin, viewsets.ReadOnlyModelViewSet):
    queryset = User.objects.filter(role='admin')
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    query_search_fields = ('name', 'email')
    query_default_sort = '-date_joined'


class SubscriptionManagementViewSet(AdminListMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Subscription.objects.select_related('user')
    serializer_class = SubscriptionSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    query_search_fields = ('plan_name', 'user__name', 'user__email')
    query_price_field = 'amount'


class BookingManagementViewSet(AdminListMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Booking.objects.select_related('customer', 'provider', 'provider__provider', 'service')
    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    query_search_fields = ('customer__name', 'provider__name', 'notes')
    query_price_field = 'total_amount'


class ReviewManagementViewSet(AdminListMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Review.objects.select_related('customer', 'provider')
    serializer_class = ReviewSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    query_search_fields = ('comment', 'customer__name', 'provider__name')
    query_default_sort = '-review_date'


class ManagementLogViewSet(AdminListMixin, viewsets.ReadOnlyModelViewSet):
    queryset = ManagementLog.objects.select_related('admin')
    serializer_class = ManagementLogSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    query_search_fields = ('action', 'details')
    query_default_sort = '-timestamp'
