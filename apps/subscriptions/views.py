import logging
import requests
from django.contrib.auth import get_user_model
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from core.query import query_helper
from core.utils import IsAdmin, IsApprovedProvider, api_response, error_response
from apps.notifications.utils import notify, send_notification
from .models import Subscription
from .serializers import (
    SubscriptionSerializer, SubscribeSerializer, AdminSubscriptionCreateSerializer,
    SubscriptionUpdateSerializer, SubscriptionPaymentSerializer
)
from .utils import (
    initialize_payment, verify_payment, verify_webhook_signature,
    get_active_subscription, is_trial_active, trial_expires_at, subscription_summary_status
)

User = get_user_model()
logger = logging.getLogger(__name__)


class SubscriptionListCreateView(APIView):

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated()]

    @swagger_auto_schema(
        operation_description="List subscriptions. Admins see every subscription, others only their own.",
        manual_parameters=[
            openapi.Parameter('q', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('page', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        ],
        responses={200: SubscriptionSerializer(many=True)}
    )
    def get(self, request):
        queryset = Subscription.objects.select_related('user')
        default_filters = None if request.user.is_admin else {'user': request.user}
        items, pagination = query_helper(
            queryset, request.query_params,
            search_fields=['plan_name', 'user__name', 'user__email'],
            default_filters=default_filters,
            price_field='amount',
            rating_field=None,
        )
        return api_response(SubscriptionSerializer(items, many=True).data, pagination=pagination)

    @swagger_auto_schema(
        request_body=AdminSubscriptionCreateSerializer,
        responses={201: SubscriptionSerializer, 400: 'Bad Request'}
    )
    def post(self, request):
        serializer = AdminSubscriptionCreateSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            subscription = serializer.save()
            logger.info(f"Admin {request.user.id} created subscription {subscription.id} for user {subscription.user_id}")
            return api_response(
                SubscriptionSerializer(subscription).data,
                message="Subscription created successfully",
                status_code=status.HTTP_201_CREATED
            )
        return error_response("Validation failed", errors=serializer.errors)


class SubscriptionDetailView(APIView):

    def get_permissions(self):
        if self.request.method in ('PUT', 'PATCH', 'DELETE'):
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated()]

    def get_object(self, id):
        return Subscription.objects.select_related('user').get(pk=id)

    @swagger_auto_schema(responses={200: SubscriptionSerializer, 403: 'Forbidden', 404: 'Not Found'})
    def get(self, request, id):
        try:
            subscription = self.get_object(id)
        except Subscription.DoesNotExist:
            return error_response("Subscription not found", status_code=404)
        if not request.user.is_admin and subscription.user_id != request.user.id:
            return error_response("You do not have permission to view this subscription", status_code=403)
        return api_response(SubscriptionSerializer(subscription).data)

    @swagger_auto_schema(request_body=SubscriptionUpdateSerializer, responses={200: SubscriptionSerializer})
    def put(self, request, id):
        try:
            subscription = self.get_object(id)
        except Subscription.DoesNotExist:
            return error_response("Subscription not found", status_code=404)
        serializer = SubscriptionUpdateSerializer(subscription, data=request.data, partial=True)
        if serializer.is_valid():
            subscription = serializer.save()
            return api_response(SubscriptionSerializer(subscription).data, message="Subscription updated successfully")
        return error_response("Validation failed", errors=serializer.errors)

    patch = put

    @swagger_auto_schema(responses={200: 'Deleted', 404: 'Not Found'})
    def delete(self, request, id):
        try:
            subscription = self.get_object(id)
        except Subscription.DoesNotExist:
            return error_response("Subscription not found", status_code=404)
        subscription.delete()
        logger.info(f"Admin {request.user.id} deleted subscription {id}")
        return api_response(message="Subscription deleted successfully")


class SubscribeView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Subscribe yourself to a plan. Free plans activate immediately, paid plans wait for payment.",
        request_body=SubscribeSerializer,
        responses={201: SubscriptionSerializer, 400: 'Bad Request'}
    )
    def post(self, request):
        serializer = SubscribeSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            subscription = serializer.save(user=request.user)
            if subscription.payment_status == 'paid':
                message = "Free subscription created and activated successfully."
            else:
                message = "Subscription created successfully. Please complete payment to activate."
            return api_response(
                SubscriptionSerializer(subscription).data,
                message=message,
                status_code=status.HTTP_201_CREATED
            )
        return error_response("Validation failed", errors=serializer.errors)


class SubscriptionAdminSummaryView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @swagger_auto_schema(operation_description="Trial and subscription state of every provider and customer.")
    def get(self, request):
        users = User.objects.filter(role__in=['provider', 'customer']).select_related('current_subscription')
        summary = []
        for user in users.order_by('role', '-date_joined'):
            subscription = user.current_subscription
            summary.append({
                'id': user.id,
                'name': user.name,
                'email': user.email,
                'role': user.role,
                'type': user.role.capitalize(),
                'created_at': user.date_joined,
                'trialExpiresAt': trial_expires_at(user),
                'subscription': {
                    'plan': subscription.plan_name,
                    'status': subscription.status,
                    'start_date': subscription.start_date,
                    'end_date': subscription.end_date,
                    'payment_status': subscription.payment_status,
                } if subscription else None,
                'status': subscription_summary_status(user),
            })
        return api_response(summary)


class ProviderSubscriptionView(APIView):
    permission_classes = [IsAuthenticated, IsApprovedProvider]

    @swagger_auto_schema(responses={200: SubscriptionSerializer, 404: 'Not Found'})
    def get(self, request):
        subscription = Subscription.objects.filter(user=request.user).first()
        if not subscription:
            return error_response("No subscription found", status_code=404)
        return api_response(SubscriptionSerializer(subscription).data)


class UserSubscriptionStatusView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(operation_description="Active, pending and historical subscriptions plus trial state.")
    def get(self, request):
        subscriptions = Subscription.objects.filter(user=request.user)
        pending = subscriptions.filter(payment_status='pending').first()
        active = get_active_subscription(request.user)
        return api_response({
            'activeSubscription': SubscriptionSerializer(active).data if active else None,
            'pendingSubscription': SubscriptionSerializer(pending).data if pending else None,
            'allSubscriptions': SubscriptionSerializer(subscriptions, many=True).data,
            'isTrialActive': is_trial_active(request.user),
            'trialExpiresAt': trial_expires_at(request.user),
        })


class SubscriptionPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Start a Chapa checkout for one of your unpaid subscriptions.",
        request_body=SubscriptionPaymentSerializer,
        responses={
            200: openapi.Response('Checkout created', openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'checkout_url': openapi.Schema(type=openapi.TYPE_STRING),
                    'tx_ref': openapi.Schema(type=openapi.TYPE_STRING),
                }
            )),
            400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found', 502: 'Gateway error'
        }
    )
    def post(self, request):
        serializer = SubscriptionPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Subscription ID is required", errors=serializer.errors)

        try:
            subscription = Subscription.objects.get(pk=serializer.validated_data['subscription_id'])
        except Subscription.DoesNotExist:
            return error_response("Subscription not found", status_code=404)

        if subscription.user_id != request.user.id:
            return error_response("You can only pay for your own subscriptions", status_code=403)
        if subscription.payment_status == 'paid':
            return error_response("Subscription is already paid")
        if subscription.amount <= 0:
            return error_response("Free subscriptions do not require payment")

        try:
            checkout_url, tx_ref = initialize_payment(subscription, request.user)
        except ValueError as e:
            return error_response(str(e))
        except requests.RequestException:
            return error_response("Payment gateway is unavailable. Please try again later.", status_code=502)

        subscription.tx_ref = tx_ref
        subscription.checkout_url = checkout_url
        subscription.payment_status = 'pending'
        subscription.save()
        logger.info(f"Checkout {tx_ref} started for subscription {subscription.id}")
        return api_response({'checkout_url': checkout_url, 'tx_ref': tx_ref}, message="Checkout session created")


class PaymentWebhookView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @swagger_auto_schema(auto_schema=None)
    def post(self, request):
        body = request.body
        signature = request.headers.get('Chapa-Signature') or request.headers.get('X-Chapa-Signature')
        if not verify_webhook_signature(body, signature):
            logger.warning('Invalid webhook signature')
            return Response({'error': 'Invalid webhook signature'}, status=status.HTTP_400_BAD_REQUEST)

        data = request.data
        tx_ref = data.get('tx_ref')
        payment_status = (data.get('status') or '').lower()
        if not tx_ref:
            logger.warning('Webhook payload without tx_ref')
            return Response({'error': 'Missing tx_ref'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            subscription = Subscription.objects.select_related('user').get(tx_ref=tx_ref)
        except Subscription.DoesNotExist:
            logger.error(f'Subscription not found for tx_ref: {tx_ref}')
            return Response({'error': 'Subscription not found'}, status=status.HTTP_404_NOT_FOUND)

        if subscription.payment_status == 'paid':
            return Response({'received': True}, status=status.HTTP_200_OK)

        if payment_status != 'success':
            subscription.payment_status = 'failed'
            subscription.save()
            notify(subscription.user, f"Payment for your {subscription.plan_name} subscription failed.", 'error')
            logger.error(f'Payment failed for tx_ref: {tx_ref}')
            return Response({'received': True}, status=status.HTTP_200_OK)

        try:
            verification = verify_payment(tx_ref)
        except requests.RequestException:
            return Response({'error': 'Verification unavailable'}, status=status.HTTP_502_BAD_GATEWAY)

        verified_data = verification.get('data') or {}
        if verification.get('status') != 'success' or verified_data.get('status', 'success') != 'success':
            subscription.payment_status = 'failed'
            subscription.save()
            logger.error(f'Payment verification failed for tx_ref: {tx_ref}')
            return Response({'error': 'Verification failed'}, status=status.HTTP_400_BAD_REQUEST)

        subscription.mark_as_paid(gateway_reference=verified_data.get('reference') or data.get('reference'))
        user = subscription.user
        notify(user, f"Your {subscription.plan_name} subscription is now active.", 'success')
        send_notification(
            user,
            f"WorkBond {subscription.plan_name} subscription activated",
            (
                f"Dear {user.name},\n\n"
                f"Your payment of {subscription.amount} {data.get('currency', '')} has been confirmed.\n"
                f"Your {subscription.plan_name} plan is active until {subscription.end_date:%Y-%m-%d}.\n\n"
                f"Best regards,\nWorkBond Team"
            ),
            f"Your WorkBond {subscription.plan_name} plan is active until {subscription.end_date:%Y-%m-%d}."
        )
        logger.info(f'Subscription {subscription.id} activated by payment {tx_ref}')
        return Response({'received': True}, status=status.HTTP_200_OK)
