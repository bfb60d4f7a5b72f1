from django.conf import settings
from django.contrib.auth import get_user_model, authenticate
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from teamhub.exceptions import ConflictError
from .models import Role

User = get_user_model()


def send_verification_email(user):
    token = default_token_generator.make_token(user)
    verification_link = f'{settings.FRONTEND_URL}/verify-email/?user_id={user.id}&token={token}'
    send_mail(
        'Email Verification',
        f'Please verify your email by clicking the link: {verification_link}',
        settings.DEFAULT_FROM_EMAIL,
        [user.email],
    )


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)
    password2 = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['email', 'name', 'password', 'password2']
        extra_kwargs = {'email': {'validators': []}}

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise ConflictError("User already exists.")
        return value.lower()

    def validate(self, attrs):
        if attrs['password'] != attrs['password2']:
            raise serializers.ValidationError({'password': 'Passwords do not match.'})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password2')
        user = User.objects.create_user(
            email=validated_data['email'],
            name=validated_data['name'],
            password=validated_data['password'],
        )
        send_verification_email(user)
        return user


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = authenticate(email=attrs.get('email', '').lower(), password=attrs.get('password'))

        if not user:
            raise AuthenticationFailed("Invalid email or password.")

        if not user.is_verified:
            raise AuthenticationFailed("Email not verified. Please check your inbox.")

        attrs['user'] = user
        return attrs


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact user representation embedded in other resources."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'is_verified', 'date_joined']
        read_only_fields = ['id', 'email', 'role', 'is_verified', 'date_joined']


class AdminUserSerializer(serializers.ModelSerializer):
    """Used by admins to create and edit accounts. Created users are pre-verified."""
    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'password', 'is_verified', 'date_joined']
        read_only_fields = ['id', 'date_joined']
        # uniqueness is checked in the view so it can raise ConflictError
        extra_kwargs = {'email': {'validators': []}}

    def validate_email(self, value):
        return value.lower()

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'This field is required.'})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        validated_data.setdefault('role', Role.USER)
        validated_data['is_verified'] = True
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.CharField()
