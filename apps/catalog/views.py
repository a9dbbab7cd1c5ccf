import logging
from django.db.models import Q
from rest_framework.views import APIView
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from core.query import query_helper
from core.utils import IsAdmin, api_response, error_response
from apps.users.models import Provider
from apps.users.serializers import ProviderProfileSerializer
from .models import Service, PriceList
from .serializers import ServiceSerializer, PriceListSerializer

logger = logging.getLogger(__name__)

list_parameters = [
    openapi.Parameter('q', openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter('minPrice', openapi.IN_QUERY, type=openapi.TYPE_NUMBER),
    openapi.Parameter('maxPrice', openapi.IN_QUERY, type=openapi.TYPE_NUMBER),
    openapi.Parameter('sort', openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter('page', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
]


class AdminWriteMixin:
    """Reads are public, writes need an admin."""

    def get_permissions(self):
        if self.request.method in ('POST', 'PUT', 'PATCH', 'DELETE'):
            return [IsAuthenticated(), IsAdmin()]
        return [AllowAny()]


class ServiceListCreateView(AdminWriteMixin, APIView):

    @swagger_auto_schema(manual_parameters=list_parameters, responses={200: ServiceSerializer(many=True)})
    def get(self, request):
        items, pagination = query_helper(
            Service.objects.all(),
            request.query_params,
            search_fields=['name', 'description', 'category'],
            price_field='base_price',
            rating_field=None,
            default_sort='name',
        )
        return api_response(ServiceSerializer(items, many=True).data, pagination=pagination)

    @swagger_auto_schema(request_body=ServiceSerializer, responses={201: ServiceSerializer})
    def post(self, request):
        serializer = ServiceSerializer(data=request.data)
        if serializer.is_valid():
            service = serializer.save()
            logger.info(f"Service {service.id} created by admin {request.user.id}")
            return api_response(serializer.data, message="Service created successfully", status_code=status.HTTP_201_CREATED)
        return error_response("Validation failed", errors=serializer.errors)


class ServiceDetailView(AdminWriteMixin, APIView):

    @swagger_auto_schema(responses={200: ServiceSerializer, 404: 'Not Found'})
    def get(self, request, id):
        try:
            service = Service.objects.get(pk=id)
        except Service.DoesNotExist:
            return error_response("Service not found", status_code=404)
        return api_response(ServiceSerializer(service).data)

    @swagger_auto_schema(request_body=ServiceSerializer, responses={200: ServiceSerializer})
    def put(self, request, id):
        try:
            service = Service.objects.get(pk=id)
        except Service.DoesNotExist:
            return error_response("Service not found", status_code=404)
        serializer = ServiceSerializer(service, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return api_response(serializer.data, message="Service updated successfully")
        return error_response("Validation failed", errors=serializer.errors)

    def delete(self, request, id):
        try:
            service = Service.objects.get(pk=id)
        except Service.DoesNotExist:
            return error_response("Service not found", status_code=404)
        service.delete()
        logger.info(f"Service {id} deleted by admin {request.user.id}")
        return api_response(message="Service deleted successfully")


class ServiceProvidersView(APIView):
    permission_classes = []

    @swagger_auto_schema(
        operation_description="Approved providers whose skills mention the service name or category.",
        responses={200: ProviderProfileSerializer(many=True), 404: 'Not Found'}
    )
    def get(self, request, id):
        try:
            service = Service.objects.get(pk=id)
        except Service.DoesNotExist:
            return error_response("Service not found", status_code=404)

        skill_match = Q(skills__icontains=service.name)
        if service.category:
            skill_match |= Q(skills__icontains=service.category)
        items, pagination = query_helper(
            Provider.objects.select_related('user').filter(skill_match),
            request.query_params,
            search_fields=['user__name', 'address'],
            default_filters={'is_approved': True},
            price_field=None,
            default_sort=['-rating', '-created_at'],
        )
        return api_response(
            ProviderProfileSerializer(items, many=True, context={'request': request}).data,
            pagination=pagination,
            service=ServiceSerializer(service).data
        )


class PriceListListCreateView(AdminWriteMixin, APIView):

    @swagger_auto_schema(responses={200: PriceListSerializer(many=True)})
    def get(self, request):
        items, pagination = query_helper(
            PriceList.objects.select_related('service'),
            request.query_params,
            search_fields=['description', 'service__name'],
            price_field='fixed_price',
            rating_field=None,
        )
        return api_response(PriceListSerializer(items, many=True).data, pagination=pagination)

    @swagger_auto_schema(request_body=PriceListSerializer, responses={201: PriceListSerializer})
    def post(self, request):
        serializer = PriceListSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return api_response(serializer.data, message="Price list created successfully", status_code=status.HTTP_201_CREATED)
        return error_response("Validation failed", errors=serializer.errors)


class PriceListDetailView(AdminWriteMixin, APIView):

    def get_object(self, id):
        return PriceList.objects.select_related('service').get(pk=id)

    @swagger_auto_schema(responses={200: PriceListSerializer, 404: 'Not Found'})
    def get(self, request, id):
        try:
            price_list = self.get_object(id)
        except PriceList.DoesNotExist:
            return error_response("Price list not found", status_code=404)
        return api_response(PriceListSerializer(price_list).data)

    @swagger_auto_schema(request_body=PriceListSerializer, responses={200: PriceListSerializer})
    def put(self, request, id):
        try:
            price_list = self.get_object(id)
        except PriceList.DoesNotExist:
            return error_response("Price list not found", status_code=404)
        serializer = PriceListSerializer(price_list, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return api_response(serializer.data, message="Price list updated successfully")
        return error_response("Validation failed", errors=serializer.errors)

    def delete(self, request, id):
        try:
            price_list = self.get_object(id)
        except PriceList.DoesNotExist:
            return error_response("Price list not found", status_code=404)
        price_list.delete()
        return api_response(message="Price list deleted successfully")


class PriceListByServiceView(APIView):
    permission_classes = []

    @swagger_auto_schema(responses={200: PriceListSerializer(many=True), 404: 'Not Found'})
    def get(self, request, service_id):
        if not Service.objects.filter(pk=service_id).exists():
            return error_response("Service not found", status_code=404)
        price_lists = PriceList.objects.select_related('service').filter(service_id=service_id, is_active=True)
        return api_response(PriceListSerializer(price_lists, many=True).data)
