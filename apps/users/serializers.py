import logging
import re
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed, Throttled
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import transaction
from django.utils import timezone
from .models import Customer, Provider

User = get_user_model()
logger = logging.getLogger(__name__)

LOGIN_ATTEMPT_LIMIT = 5
LOGIN_LOCKOUT_SECONDS = 900


def _validate_unique_email(value):
    value = value.strip().lower()
    if User.objects.filter(email__iexact=value).exists():
        raise serializers.ValidationError("Email already in use.")
    return value


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'phone_number', 'role', 'date_joined']
        read_only_fields = fields


class BaseRegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, min_length=2)
    email = serializers.EmailField()
    password = serializers.CharField(
        max_length=128,
        write_only=True,
        min_length=8,
        error_messages={'min_length': 'Password must be at least 8 characters long.'}
    )

    role = None

    def validate_email(self, value):
        return _validate_unique_email(value)

    def create_user(self, validated_data):
        email = validated_data['email']
        return User.objects.create_user(
            username=email,
            email=email,
            password=validated_data['password'],
            name=validated_data['name'].strip(),
            phone_number=validated_data.get('phone_number') or None,
            role=self.role,
        )


class CustomerRegisterSerializer(BaseRegisterSerializer):
    phone_number = serializers.CharField(max_length=15)
    address = serializers.CharField(max_length=255)

    role = 'customer'

    @transaction.atomic
    def create(self, validated_data):
        user = self.create_user(validated_data)
        Customer.objects.create(user=user, address=validated_data['address'])
        logger.info(f"Customer registered: {user.email}")
        return user


class ProviderRegisterSerializer(BaseRegisterSerializer):
    phone_number = serializers.CharField(max_length=15)
    address = serializers.CharField(max_length=255)
    experience_years = serializers.IntegerField(min_value=1)
    skills = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=False)

    role = 'provider'

    def validate_phone_number(self, value):
        if not re.match(r'^\d{10}$', value):
            raise serializers.ValidationError("Phone number must be exactly 10 digits.")
        return value

    @transaction.atomic
    def create(self, validated_data):
        user = self.create_user(validated_data)
        Provider.objects.create(
            user=user,
            address=validated_data['address'],
            experience_years=validated_data['experience_years'],
            skills=[skill.strip() for skill in validated_data['skills'] if skill.strip()],
        )
        logger.info(f"Provider registered and awaiting approval: {user.email}")
        return user


class AdminRegisterSerializer(BaseRegisterSerializer):
    role = 'admin'

    def create(self, validated_data):
        user = self.create_user(validated_data)
        user.is_staff = True
        user.save(update_fields=['is_staff'])
        logger.info(f"Admin registered: {user.email}")
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(max_length=128, write_only=True)
    role = serializers.ChoiceField(choices=['customer', 'provider', 'admin'])

    def validate(self, data):
        email = data['email'].strip().lower()
        cache_key = f'login_attempts_{email}'
        attempts = cache.get(cache_key, 0)
        if attempts >= LOGIN_ATTEMPT_LIMIT:
            logger.warning(f"Too many login attempts for {email}")
            raise Throttled(
                wait=LOGIN_LOCKOUT_SECONDS,
                detail="Too many login attempts. Please try again in 15 minutes."
            )

        user = User.get_by_email(email)
        role = data['role']
        role_matches = user is not None and (
            (role == 'admin' and user.is_admin) or
            (role == 'customer' and user.is_customer) or
            (role == 'provider' and user.is_provider)
        )
        if not role_matches or not user.check_password(data['password']) or not user.is_active:
            logger.warning(f"Failed login for {email} as {role}")
            cache.set(cache_key, attempts + 1, LOGIN_LOCKOUT_SECONDS)
            raise AuthenticationFailed("Invalid email or password.")

        cache.delete(cache_key)
        data['user'] = user
        return data

    def save(self):
        user = self.validated_data['user']
        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        return user


class CustomerProfileSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='user.id', read_only=True)
    name = serializers.CharField(source='user.name', max_length=150, required=False)
    email = serializers.EmailField(source='user.email', read_only=True)
    phone_number = serializers.CharField(source='user.phone_number', max_length=15, required=False, allow_blank=True)

    class Meta:
        model = Customer
        fields = ['id', 'name', 'email', 'phone_number', 'address', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def update(self, instance, validated_data):
        user_data = validated_data.pop('user', {})
        if 'phone_number' in user_data:
            user_data['phone_number'] = user_data['phone_number'] or None
        for attr, value in user_data.items():
            setattr(instance.user, attr, value)
        instance.user.save()
        return super().update(instance, validated_data)


class ProviderProfileSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='user.id', read_only=True)
    name = serializers.CharField(source='user.name', max_length=150, required=False)
    email = serializers.EmailField(source='user.email', read_only=True)
    phone_number = serializers.CharField(source='user.phone_number', max_length=15, required=False)
    skills = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=False, required=False)
    experience_years = serializers.IntegerField(min_value=1, required=False)
    approval_status = serializers.CharField(read_only=True)

    class Meta:
        model = Provider
        fields = [
            'id', 'name', 'email', 'phone_number', 'address', 'experience_years', 'skills',
            'availability_status', 'rating', 'profile_image', 'is_approved', 'approval_status',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['rating', 'profile_image', 'is_approved', 'created_at', 'updated_at']

    def validate_phone_number(self, value):
        if not re.match(r'^\d{10}$', value):
            raise serializers.ValidationError("Phone number must be exactly 10 digits.")
        return value

    def update(self, instance, validated_data):
        user_data = validated_data.pop('user', {})
        for attr, value in user_data.items():
            setattr(instance.user, attr, value)
        instance.user.save()
        return super().update(instance, validated_data)


class ProviderImageSerializer(serializers.ModelSerializer):
    profile_image = serializers.ImageField(required=True)

    class Meta:
        model = Provider
        fields = ['profile_image']


class ProviderApprovalSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='user.id', read_only=True)
    name = serializers.CharField(source='user.name', read_only=True)
    approval_status = serializers.CharField(read_only=True)
    message = serializers.SerializerMethodField()

    class Meta:
        model = Provider
        fields = ['id', 'name', 'is_approved', 'approval_status', 'approved_at', 'message']

    def get_message(self, obj):
        if obj.is_approved:
            return "Your provider account has been approved."
        return "Your provider account is pending admin approval."
