from rest_framework import serializers
from .models import User, CustomerProfile


class CustomerProfileSerializer(serializers.ModelSerializer):
    b2b_account_name = serializers.CharField(source='b2b_account.company_name', read_only=True, default=None)

    class Meta:
        model = CustomerProfile
        fields = ['phone', 'company_name', 'b2b_account', 'b2b_account_name']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    customer_profile = CustomerProfileSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'created_at',
            'customer_profile',
        ]
        read_only_fields = fields


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
