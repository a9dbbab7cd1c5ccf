import logging
from rest_framework.views import APIView
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from core.query import query_helper
from core.utils import IsCustomer, IsApprovedProvider, api_response, error_response
from apps.users.permissions import RoleBasedPermission
from apps.subscriptions.permissions import HasSubscriptionOrTrial
from apps.notifications.utils import notify
from .models import Booking, Review
from .serializers import (
    BookingSerializer, BookingUpdateSerializer, BookingStatusSerializer,
    ReviewSerializer, ReviewCreateSerializer, ReviewUpdateSerializer
)

logger = logging.getLogger(__name__)

BOOKING_FILTER_FIELDS = {'status', 'service', 'provider', 'customer'}
REVIEW_FILTER_FIELDS = {'rating', 'author_role', 'provider', 'customer', 'booking'}

page_parameters = [
    openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter('sort', openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter('page', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
]


def _booking_queryset():
    return Booking.objects.select_related('customer', 'provider', 'provider__provider', 'service')


class BookingListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @swagger_auto_schema(manual_parameters=page_parameters, responses={200: BookingSerializer(many=True)})
    def get(self, request):
        items, pagination = query_helper(
            _booking_queryset(),
            request.query_params,
            default_filters={'customer': request.user},
            filter_fields=BOOKING_FILTER_FIELDS,
            price_field='total_amount',
            rating_field=None,
        )
        return api_response(BookingSerializer(items, many=True).data, pagination=pagination)

    @swagger_auto_schema(request_body=BookingSerializer, responses={201: BookingSerializer, 404: 'Provider not found'})
    def post(self, request):
        serializer = BookingSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Validation failed", errors=serializer.errors)

        provider = serializer.validated_data['provider']
        if not provider.is_provider or not provider.provider.is_approved:
            return error_response("Provider not found or not approved", status_code=404)

        booking = serializer.save(customer=request.user, status='Pending')
        notify(
            provider,
            f"New booking from {request.user.name} scheduled for {booking.scheduled_date:%Y-%m-%d %H:%M}.",
            'info'
        )
        logger.info(f"Customer {request.user.id} booked provider {provider.id} (booking {booking.id})")
        return api_response(
            BookingSerializer(booking).data,
            message="Booking created successfully",
            status_code=status.HTTP_201_CREATED
        )


class BookingDetailView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @swagger_auto_schema(responses={200: BookingSerializer, 404: 'Not Found'})
    def get(self, request, id):
        try:
            booking = _booking_queryset().get(pk=id, customer=request.user)
        except Booking.DoesNotExist:
            return error_response("Booking not found", status_code=404)
        return api_response(BookingSerializer(booking).data)

    @swagger_auto_schema(request_body=BookingUpdateSerializer, responses={200: BookingSerializer})
    def put(self, request, id):
        try:
            booking = _booking_queryset().get(pk=id, customer=request.user)
        except Booking.DoesNotExist:
            return error_response("Booking not found", status_code=404)
        serializer = BookingUpdateSerializer(booking, data=request.data, partial=True)
        if serializer.is_valid():
            booking = serializer.save()
            return api_response(BookingSerializer(booking).data, message="Booking updated successfully")
        return error_response("Validation failed", errors=serializer.errors)


class BookingCancelView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @swagger_auto_schema(request_body=None, responses={200: BookingSerializer, 400: 'Bad Request', 404: 'Not Found'})
    def put(self, request, id):
        try:
            booking = _booking_queryset().get(pk=id, customer=request.user)
        except Booking.DoesNotExist:
            return error_response("Booking not found", status_code=404)
        if booking.is_closed:
            return error_response(f"A {booking.status.lower()} booking cannot be cancelled")
        booking.status = 'Cancelled'
        booking.save()
        notify(booking.provider, f"Booking {booking.id} was cancelled by {request.user.name}.", 'warning')
        return api_response(BookingSerializer(booking).data, message="Booking cancelled successfully")


class ProviderBookingListView(APIView):
    permission_classes = [IsAuthenticated, IsApprovedProvider, HasSubscriptionOrTrial]

    @swagger_auto_schema(manual_parameters=page_parameters, responses={200: BookingSerializer(many=True)})
    def get(self, request):
        items, pagination = query_helper(
            _booking_queryset(),
            request.query_params,
            default_filters={'provider': request.user},
            filter_fields=BOOKING_FILTER_FIELDS,
            price_field='total_amount',
            rating_field=None,
        )
        return api_response(BookingSerializer(items, many=True).data, pagination=pagination)


class ProviderBookingStatusView(APIView):
    permission_classes = [IsAuthenticated, IsApprovedProvider, HasSubscriptionOrTrial]

    @swagger_auto_schema(request_body=BookingStatusSerializer, responses={200: BookingSerializer})
    def put(self, request, id):
        try:
            booking = _booking_queryset().get(pk=id, provider=request.user)
        except Booking.DoesNotExist:
            return error_response("Booking not found", status_code=404)
        serializer = BookingStatusSerializer(data=request.data, context={'booking': booking})
        if not serializer.is_valid():
            return error_response("Validation failed", errors=serializer.errors)

        booking.status = serializer.validated_data['status']
        booking.save()
        notify(
            booking.customer,
            f"Your booking with {request.user.name} is now {booking.status.lower()}.",
            'warning' if booking.status == 'Cancelled' else 'success'
        )
        return api_response(BookingSerializer(booking).data, message="Booking status updated successfully")


class ProviderReviewListView(APIView):
    """Reviews customers wrote about the current provider."""
    permission_classes = [IsAuthenticated, IsApprovedProvider, HasSubscriptionOrTrial]

    @swagger_auto_schema(manual_parameters=page_parameters[1:], responses={200: ReviewSerializer(many=True)})
    def get(self, request):
        items, pagination = query_helper(
            Review.objects.select_related('customer', 'provider'),
            request.query_params,
            search_fields=['comment'],
            default_filters={'provider': request.user, 'author_role': 'customer'},
            filter_fields=REVIEW_FILTER_FIELDS,
            price_field=None,
            default_sort='-review_date',
        )
        return api_response(ReviewSerializer(items, many=True).data, pagination=pagination)


class CustomerReviewListView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @swagger_auto_schema(manual_parameters=page_parameters[1:], responses={200: ReviewSerializer(many=True)})
    def get(self, request):
        items, pagination = query_helper(
            Review.objects.select_related('customer', 'provider'),
            request.query_params,
            default_filters={'customer': request.user, 'author_role': 'customer'},
            filter_fields=REVIEW_FILTER_FIELDS,
            price_field=None,
            default_sort='-review_date',
        )
        return api_response(ReviewSerializer(items, many=True).data, pagination=pagination)


class ReviewListCreateView(APIView):
    required_roles = ['customer', 'provider']

    def get_permissions(self):
        if self.request.method != 'POST':
            return [AllowAny()]
        permissions = [IsAuthenticated(), RoleBasedPermission()]
        if self.request.user.is_authenticated and self.request.user.is_provider:
            permissions += [IsApprovedProvider(), HasSubscriptionOrTrial()]
        return permissions

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('q', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('provider', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter('minRating', openapi.IN_QUERY, type=openapi.TYPE_NUMBER),
        ] + page_parameters[1:],
        responses={200: ReviewSerializer(many=True)}
    )
    def get(self, request):
        items, pagination = query_helper(
            Review.objects.select_related('customer', 'provider'),
            request.query_params,
            search_fields=['comment', 'provider__name', 'customer__name'],
            filter_fields=REVIEW_FILTER_FIELDS,
            price_field=None,
            default_sort='-review_date',
        )
        return api_response(ReviewSerializer(items, many=True).data, pagination=pagination)

    @swagger_auto_schema(request_body=ReviewCreateSerializer, responses={201: ReviewSerializer, 400: 'Bad Request'})
    def post(self, request):
        serializer = ReviewCreateSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            review = serializer.save()
            target = review.provider if review.author_role == 'customer' else review.customer
            notify(target, f"{request.user.name} left you a {review.rating}-star review.", 'info')
            return api_response(
                ReviewSerializer(review).data,
                message="Review created successfully",
                status_code=status.HTTP_201_CREATED
            )
        return error_response("Validation failed", errors=serializer.errors)


class ReviewDetailView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_object(self, id):
        return Review.objects.select_related('customer', 'provider').get(pk=id)

    @swagger_auto_schema(responses={200: ReviewSerializer, 404: 'Not Found'})
    def get(self, request, id):
        try:
            review = self.get_object(id)
        except Review.DoesNotExist:
            return error_response("Review not found", status_code=404)
        return api_response(ReviewSerializer(review).data)

    @swagger_auto_schema(request_body=ReviewUpdateSerializer, responses={200: ReviewSerializer})
    def put(self, request, id):
        try:
            review = self.get_object(id)
        except Review.DoesNotExist:
            return error_response("Review not found", status_code=404)
        if review.author != request.user and not request.user.is_admin:
            return error_response("You can only edit your own reviews", status_code=403)
        serializer = ReviewUpdateSerializer(review, data=request.data, partial=True)
        if serializer.is_valid():
            review = serializer.save()
            return api_response(ReviewSerializer(review).data, message="Review updated successfully")
        return error_response("Validation failed", errors=serializer.errors)

    def delete(self, request, id):
        try:
            review = self.get_object(id)
        except Review.DoesNotExist:
            return error_response("Review not found", status_code=404)
        if review.author != request.user and not request.user.is_admin:
            return error_response("You can only delete your own reviews", status_code=403)
        review.delete()
        return api_response(message="Review deleted successfully")
