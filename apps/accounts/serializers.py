from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Profile of the authenticated user including their household seat."""

    household_id = serializers.UUIDField(read_only=True)
    household_name = serializers.SerializerMethodField()
    is_household_admin = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'household_id',
            'household_name',
            'role',
            'is_household_admin',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'role', 'created_at', 'last_login']

    def get_household_name(self, obj):
        return obj.household.name if obj.household_id else None


class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    Validate sign-up input.

    Account creation itself lives in ``register_user`` so the view never
    touches the ORM directly.
    """

    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['email', 'display_name', 'password', 'password_confirm']
        extra_kwargs = {
            # Uniqueness is enforced case-insensitively by the service
            'email': {'validators': []},
        }

    def validate_email(self, value):
        return value.strip().lower()

    def validate_display_name(self, value):
        return value.strip()

    def validate(self, attrs):
        if attrs['password'] != attrs.pop('password_confirm'):
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
