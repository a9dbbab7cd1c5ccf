from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import serializers
from core.constants import SUBSCRIPTION_STATUS_CHOICES, SUBSCRIPTION_USER_TYPE_CHOICES
from .models import Subscription

User = get_user_model()


class SubscriptionSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.name', read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True)
    is_current = serializers.BooleanField(read_only=True)

    class Meta:
        model = Subscription
        fields = [
            'id', 'user', 'user_name', 'user_email', 'user_type', 'plan_name',
            'start_date', 'end_date', 'renewal_date', 'status', 'amount',
            'payment_status', 'tx_ref', 'checkout_url', 'paid_at', 'is_current',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class SubscribeSerializer(serializers.ModelSerializer):
    """Self-service subscription for the requesting customer or provider."""
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    class Meta:
        model = Subscription
        fields = ['id', 'plan_name', 'start_date', 'end_date', 'renewal_date', 'amount']
        extra_kwargs = {
            'plan_name': {'required': True},
            'end_date': {'required': True},
        }

    def get_subscriber(self, data):
        return self.context['request'].user

    def validate(self, data):
        user = self.get_subscriber(data)
        if not (user.is_customer or user.is_provider):
            raise serializers.ValidationError("Subscriptions are only available to customers and providers.")
        expected_type = 'Provider' if user.is_provider else 'Customer'
        if data.get('user_type') and data['user_type'] != expected_type:
            raise serializers.ValidationError({"user_type": f"User type must be {expected_type} for this user."})
        data['user_type'] = expected_type

        start_date = data.get('start_date') or timezone.now()
        if data['end_date'] <= start_date:
            raise serializers.ValidationError({"end_date": "End date must be after the start date."})
        return data

    def create(self, validated_data):
        is_free = validated_data['amount'] == 0
        subscription = Subscription.objects.create(
            status='Active',
            payment_status='paid' if is_free else 'pending',
            paid_at=timezone.now() if is_free else None,
            **validated_data
        )
        if is_free and subscription.is_current:
            user = subscription.user
            user.current_subscription = subscription
            user.save(update_fields=['current_subscription'])
        return subscription


class AdminSubscriptionCreateSerializer(SubscribeSerializer):
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role__in=['customer', 'provider']))
    user_type = serializers.ChoiceField(choices=SUBSCRIPTION_USER_TYPE_CHOICES, required=False)

    class Meta(SubscribeSerializer.Meta):
        fields = ['id', 'user', 'user_type', 'plan_name', 'start_date', 'end_date', 'renewal_date', 'amount']

    def get_subscriber(self, data):
        return data['user']


class SubscriptionUpdateSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(
        choices=SUBSCRIPTION_STATUS_CHOICES,
        required=False,
        error_messages={'invalid_choice': 'Invalid status. Must be Active, Cancelled, or Expired'}
    )
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)

    class Meta:
        model = Subscription
        fields = ['status', 'plan_name', 'end_date', 'renewal_date', 'amount', 'payment_status']

    def update(self, instance, validated_data):
        instance = super().update(instance, validated_data)
        user = instance.user
        if instance.is_current and user.current_subscription_id != instance.id:
            user.current_subscription = instance
            user.save(update_fields=['current_subscription'])
        elif not instance.is_current and user.current_subscription_id == instance.id:
            user.current_subscription = None
            user.save(update_fields=['current_subscription'])
        return instance


class SubscriptionPaymentSerializer(serializers.Serializer):
    subscription_id = serializers.IntegerField()
