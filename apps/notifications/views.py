import logging
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from core.constants import NOTIFICATION_LIST_LIMIT
from core.utils import api_response, error_response
from .models import Notification
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)


class NotificationListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Latest notifications for the current user plus the unread count.",
        responses={200: NotificationSerializer(many=True)}
    )
    def get(self, request):
        notifications = Notification.objects.filter(recipient=request.user)[:NOTIFICATION_LIST_LIMIT]
        unread_count = Notification.objects.filter(recipient=request.user, is_read=False).count()
        return api_response(
            NotificationSerializer(notifications, many=True).data,
            unreadCount=unread_count
        )


class NotificationMarkReadView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Mark one of your notifications as read.",
        responses={200: NotificationSerializer, 404: 'Not Found'}
    )
    def patch(self, request, id):
        try:
            notification = Notification.objects.get(pk=id, recipient=request.user)
        except Notification.DoesNotExist:
            return error_response("Notification not found", status_code=404)
        notification.mark_as_read()
        return api_response(NotificationSerializer(notification).data, message="Notification marked as read")


class NotificationMarkAllReadView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Mark every unread notification as read.",
        responses={200: openapi.Response('Updated count')}
    )
    def patch(self, request):
        updated = Notification.objects.filter(recipient=request.user, is_read=False).update(is_read=True)
        logger.info(f"User {request.user.id} marked {updated} notifications as read")
        return api_response({'updated': updated}, message="All notifications marked as read")
