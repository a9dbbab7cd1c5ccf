import logging
from rest_framework.views import APIView
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django.contrib.auth import get_user_model
from core.query import query_helper
from core.utils import IsCustomer, IsProvider, IsApprovedProvider, api_response, error_response
from .models import Provider
from .serializers import (
    UserSerializer, CustomerRegisterSerializer, ProviderRegisterSerializer, AdminRegisterSerializer,
    LoginSerializer, CustomerProfileSerializer, ProviderProfileSerializer, ProviderImageSerializer,
    ProviderApprovalSerializer
)

User = get_user_model()
logger = logging.getLogger(__name__)

PROVIDER_SEARCH_FIELDS = ['user__name', 'user__email', 'user__phone_number', 'address']

auth_response_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'success': openapi.Schema(type=openapi.TYPE_BOOLEAN),
        'statusCode': openapi.Schema(type=openapi.TYPE_INTEGER),
        'message': openapi.Schema(type=openapi.TYPE_STRING),
        'data': openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'token': openapi.Schema(type=openapi.TYPE_STRING),
                'user': openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'id': openapi.Schema(type=openapi.TYPE_INTEGER),
                        'name': openapi.Schema(type=openapi.TYPE_STRING),
                        'email': openapi.Schema(type=openapi.TYPE_STRING),
                        'phone_number': openapi.Schema(type=openapi.TYPE_STRING),
                        'role': openapi.Schema(type=openapi.TYPE_STRING),
                    }
                )
            }
        )
    }
)


class RegisterCustomerView(APIView):
    permission_classes = []

    @swagger_auto_schema(
        request_body=CustomerRegisterSerializer,
        responses={201: openapi.Response('Customer registered', auth_response_schema), 400: 'Bad Request'}
    )
    def post(self, request):
        serializer = CustomerRegisterSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            token, _ = Token.objects.get_or_create(user=user)
            return api_response(
                {'token': token.key, 'user': UserSerializer(user).data},
                message="Customer registered successfully",
                status_code=status.HTTP_201_CREATED
            )
        return error_response("Validation failed", errors=serializer.errors)


class RegisterProviderView(APIView):
    permission_classes = []

    @swagger_auto_schema(
        request_body=ProviderRegisterSerializer,
        responses={201: 'Provider registered, pending approval', 400: 'Bad Request'}
    )
    def post(self, request):
        serializer = ProviderRegisterSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            return api_response(
                {'user': UserSerializer(user).data, 'isApproved': False},
                message="Provider registered successfully. Your account is pending admin approval.",
                status_code=status.HTTP_201_CREATED
            )
        return error_response("Validation failed", errors=serializer.errors)


class RegisterAdminView(APIView):
    """
    The first admin account can be created anonymously; after that only
    an authenticated admin may register another one.
    """
    permission_classes = []

    @swagger_auto_schema(
        request_body=AdminRegisterSerializer,
        responses={201: openapi.Response('Admin registered', auth_response_schema), 403: 'Forbidden'}
    )
    def post(self, request):
        admin_exists = User.objects.filter(role='admin').exists()
        if admin_exists and not (request.user.is_authenticated and request.user.is_admin):
            return error_response("Only an admin can register another admin", status_code=403)

        serializer = AdminRegisterSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            token, _ = Token.objects.get_or_create(user=user)
            return api_response(
                {'token': token.key, 'user': UserSerializer(user).data},
                message="Admin registered successfully",
                status_code=status.HTTP_201_CREATED
            )
        return error_response("Validation failed", errors=serializer.errors)


class LoginView(APIView):
    permission_classes = []

    @swagger_auto_schema(
        request_body=LoginSerializer,
        responses={
            200: openapi.Response('Login successful', auth_response_schema),
            400: 'Bad Request',
            401: 'Invalid email or password',
            403: 'Provider pending approval',
            429: 'Too many login attempts',
        }
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Validation failed", errors=serializer.errors)

        user = serializer.validated_data['user']
        if user.is_provider and not user.provider.is_approved:
            logger.info(f"Unapproved provider {user.id} attempted to log in")
            return error_response(
                "Your provider account is pending admin approval.",
                status_code=status.HTTP_403_FORBIDDEN,
                isApproved=False
            )

        user = serializer.save()
        token, _ = Token.objects.get_or_create(user=user)
        logger.info(f"Login successful for user {user.id} as {user.role}")
        return api_response(
            {'token': token.key, 'user': UserSerializer(user).data},
            message="Login successful"
        )


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        Token.objects.filter(user=request.user).delete()
        return api_response(message="Logged out successfully")


class CustomerProfileView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @swagger_auto_schema(responses={200: CustomerProfileSerializer})
    def get(self, request):
        return api_response(CustomerProfileSerializer(request.user.customer).data)

    @swagger_auto_schema(request_body=CustomerProfileSerializer, responses={200: CustomerProfileSerializer})
    def put(self, request):
        serializer = CustomerProfileSerializer(request.user.customer, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return api_response(serializer.data, message="Profile updated successfully")
        return error_response("Validation failed", errors=serializer.errors)


class ProviderProfileView(APIView):
    permission_classes = [IsAuthenticated, IsApprovedProvider]

    @swagger_auto_schema(responses={200: ProviderProfileSerializer})
    def get(self, request):
        return api_response(ProviderProfileSerializer(request.user.provider, context={'request': request}).data)

    @swagger_auto_schema(request_body=ProviderProfileSerializer, responses={200: ProviderProfileSerializer})
    def put(self, request):
        serializer = ProviderProfileSerializer(
            request.user.provider, data=request.data, partial=True, context={'request': request}
        )
        if serializer.is_valid():
            serializer.save()
            return api_response(serializer.data, message="Profile updated successfully")
        return error_response("Validation failed", errors=serializer.errors)


class ProviderProfileImageView(APIView):
    permission_classes = [IsAuthenticated, IsApprovedProvider]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    @swagger_auto_schema(request_body=ProviderImageSerializer, responses={200: ProviderProfileSerializer})
    def patch(self, request):
        provider = request.user.provider
        serializer = ProviderImageSerializer(provider, data=request.data)
        if serializer.is_valid():
            if provider.profile_image:
                provider.profile_image.delete(save=False)
            serializer.save()
            return api_response(
                ProviderProfileSerializer(provider, context={'request': request}).data,
                message="Profile image updated successfully"
            )
        return error_response("Validation failed", errors=serializer.errors)

    def delete(self, request):
        provider = request.user.provider
        if not provider.profile_image:
            return error_response("No profile image to delete", status_code=404)
        provider.profile_image.delete(save=False)
        provider.profile_image = None
        provider.save(update_fields=['profile_image', 'updated_at'])
        return api_response(message="Profile image deleted successfully")


class ProviderCheckApprovalView(APIView):
    """Available to providers whose account is still waiting for approval."""
    permission_classes = [IsAuthenticated, IsProvider]

    @swagger_auto_schema(responses={200: ProviderApprovalSerializer})
    def get(self, request):
        return api_response(ProviderApprovalSerializer(request.user.provider).data)


class PublicProviderApprovalView(APIView):
    permission_classes = []

    @swagger_auto_schema(responses={200: ProviderApprovalSerializer, 404: 'Not Found'})
    def get(self, request, id):
        try:
            provider = Provider.objects.select_related('user').get(user_id=id)
        except Provider.DoesNotExist:
            return error_response("Provider not found", status_code=404)
        return api_response(ProviderApprovalSerializer(provider).data)


class PublicProviderListView(APIView):
    permission_classes = []

    @swagger_auto_schema(
        operation_description="Approved providers, searchable by name, email, phone and address.",
        manual_parameters=[
            openapi.Parameter('q', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('availability_status', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('minRating', openapi.IN_QUERY, type=openapi.TYPE_NUMBER),
            openapi.Parameter('maxRating', openapi.IN_QUERY, type=openapi.TYPE_NUMBER),
            openapi.Parameter('sort', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('page', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        ],
        responses={200: ProviderProfileSerializer(many=True)}
    )
    def get(self, request):
        items, pagination = query_helper(
            Provider.objects.select_related('user'),
            request.query_params,
            search_fields=PROVIDER_SEARCH_FIELDS,
            default_filters={'is_approved': True},
            price_field=None,
            default_sort=['-rating', '-created_at'],
        )
        return api_response(
            ProviderProfileSerializer(items, many=True, context={'request': request}).data,
            pagination=pagination
        )


class PublicProviderDetailView(APIView):
    permission_classes = []

    @swagger_auto_schema(responses={200: ProviderProfileSerializer, 404: 'Not Found'})
    def get(self, request, id):
        try:
            provider = Provider.objects.select_related('user').get(user_id=id, is_approved=True)
        except Provider.DoesNotExist:
            return error_response("Provider not found", status_code=404)
        return api_response(ProviderProfileSerializer(provider, context={'request': request}).data)
