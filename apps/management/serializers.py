from rest_framework import serializers
from .models import ManagementLog


class ManagementLogSerializer(serializers.ModelSerializer):
    admin_email = serializers.EmailField(source='admin.email', read_only=True, default=None)

    class Meta:
        model = ManagementLog
        fields = ['id', 'admin', 'admin_email', 'action', 'details', 'timestamp']
        read_only_fields = fields


class ProviderRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True)
