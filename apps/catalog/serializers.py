from rest_framework import serializers
from .models import Service, PriceList, validate_price_fields


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ['id', 'name', 'description', 'category', 'base_price', 'unit', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PriceListSerializer(serializers.ModelSerializer):
    service_name = serializers.CharField(source='service.name', read_only=True)
    display_price = serializers.CharField(read_only=True)

    class Meta:
        model = PriceList
        fields = [
            'id', 'service', 'service_name', 'price_type', 'fixed_price', 'unit_price', 'unit',
            'min_price', 'max_price', 'display_price', 'description', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, data):
        def current(field):
            if field in data:
                return data[field]
            return getattr(self.instance, field, None) if self.instance else None

        errors = validate_price_fields(
            current('price_type'),
            fixed_price=current('fixed_price'),
            unit_price=current('unit_price'),
            min_price=current('min_price'),
            max_price=current('max_price'),
        )
        if errors:
            raise serializers.ValidationError(errors)
        return data
