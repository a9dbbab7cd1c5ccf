from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework import serializers
from .models import Booking, Review

User = get_user_model()


class BookingSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    customer_email = serializers.EmailField(source='customer.email', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone_number', read_only=True)
    provider = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role='provider'))
    provider_name = serializers.CharField(source='provider.name', read_only=True)
    provider_skills = serializers.ListField(source='provider.provider.skills', read_only=True)
    service_name = serializers.CharField(source='service.name', read_only=True, default=None)
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))

    class Meta:
        model = Booking
        fields = [
            'id', 'customer', 'customer_name', 'customer_email', 'customer_phone',
            'provider', 'provider_name', 'provider_skills', 'service', 'service_name',
            'scheduled_date', 'total_amount', 'notes', 'status', 'created_at', 'updated_at'
        ]
        read_only_fields = ['customer', 'status', 'created_at', 'updated_at']


class BookingUpdateSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(choices=['Pending', 'Cancelled'], required=False)

    class Meta:
        model = Booking
        fields = ['scheduled_date', 'status', 'notes']

    def validate(self, data):
        if self.instance.is_closed:
            raise serializers.ValidationError(f"A {self.instance.status.lower()} booking cannot be changed.")
        return data


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['Confirmed', 'Completed', 'Cancelled'])

    def validate_status(self, value):
        booking = self.context['booking']
        if booking.is_closed:
            raise serializers.ValidationError(f"A {booking.status.lower()} booking cannot be changed.")
        if value == 'Completed' and booking.status != 'Confirmed':
            raise serializers.ValidationError("Only confirmed bookings can be completed.")
        return value


class ReviewSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    provider_name = serializers.CharField(source='provider.name', read_only=True)

    class Meta:
        model = Review
        fields = [
            'id', 'booking', 'customer', 'customer_name', 'provider', 'provider_name',
            'author_role', 'rating', 'comment', 'review_date', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.select_related('customer', 'provider'))
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(max_length=2000)

    def validate(self, data):
        user = self.context['request'].user
        booking = data['booking']
        if user.is_customer:
            if booking.customer_id != user.id:
                raise serializers.ValidationError({"booking": "You can only review your own bookings."})
            data['author_role'] = 'customer'
        elif user.is_provider:
            if booking.provider_id != user.id:
                raise serializers.ValidationError({"booking": "You can only review bookings assigned to you."})
            data['author_role'] = 'provider'
        else:
            raise serializers.ValidationError("Only customers and providers can write reviews.")

        if Review.objects.filter(booking=booking, author_role=data['author_role']).exists():
            raise serializers.ValidationError("You have already reviewed this booking.")
        return data

    def create(self, validated_data):
        booking = validated_data['booking']
        return Review.objects.create(
            booking=booking,
            customer=booking.customer,
            provider=booking.provider,
            author_role=validated_data['author_role'],
            rating=validated_data['rating'],
            comment=validated_data['comment'],
        )


class ReviewUpdateSerializer(serializers.ModelSerializer):
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False)

    class Meta:
        model = Review
        fields = ['rating', 'comment']
