import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import status, generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from activity import services as audit
from teamhub.exceptions import ConflictError, ValidationError
from .models import Role
from .permissions import Capability, capability_required
from .serializers import (
    UserRegistrationSerializer, UserLoginSerializer, UserSerializer,
    AdminUserSerializer, RoleUpdateSerializer, send_verification_email,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class UserRegistrationView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Register a new user",
        operation_description="Registers a new unverified user and sends a verification email.",
        request_body=UserRegistrationSerializer,
        responses={
            201: openapi.Response(description="User registered successfully"),
            400: openapi.Response(description="Validation errors in request body")
        }
    )
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Registered user {user.email}")

        return Response(
            {"message": "User registered successfully. Please check your email."},
            status=status.HTTP_201_CREATED
        )


class VerifyEmailView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Verify user email",
        operation_description="Verifies a user's email using a user ID and token provided via email.",
        responses={
            200: openapi.Response(description="Email successfully verified"),
            400: openapi.Response(description="Invalid user or token")
        }
    )
    def get(self, request, user_id, token):
        try:
            user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            return Response({"error": "Invalid user."}, status=status.HTTP_400_BAD_REQUEST)

        if user.is_verified:
            return Response({"message": "Email already verified. You can log in."}, status=status.HTTP_200_OK)

        if default_token_generator.check_token(user, token):
            user.is_verified = True
            user.save(update_fields=['is_verified'])
            return Response({"message": "Email successfully verified. You can now log in."}, status=status.HTTP_200_OK)

        return Response({"error": "Invalid or expired token."}, status=status.HTTP_400_BAD_REQUEST)


class ResendVerificationEmailView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_description="Resend verification email to a user who has not yet verified their email.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'email': openapi.Schema(type=openapi.TYPE_STRING, description='User\'s email address')
            },
            required=['email']
        ),
        responses={
            200: openapi.Response(description="Verification email resent successfully"),
            400: openapi.Response(description="Email missing or user already verified"),
            404: openapi.Response(description="User with the provided email not found"),
        }
    )
    def post(self, request):
        email = request.data.get('email')

        if not email:
            return Response({'error': 'Email is required.'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = User.objects.get(email=email.lower())
        except User.DoesNotExist:
            return Response({'error': 'No user with this email.'}, status=status.HTTP_404_NOT_FOUND)

        if user.is_verified:
            return Response({'error': 'User is already verified.'}, status=status.HTTP_400_BAD_REQUEST)

        send_verification_email(user)
        return Response({'message': 'Verification email resent.'}, status=status.HTTP_200_OK)


class UserLoginView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        request_body=UserLoginSerializer,
        responses={
            status.HTTP_200_OK: openapi.Response(
                description="Login successful",
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        "message": openapi.Schema(type=openapi.TYPE_STRING),
                        "access_token": openapi.Schema(type=openapi.TYPE_STRING),
                        "refresh_token": openapi.Schema(type=openapi.TYPE_STRING),
                        "user": openapi.Schema(type=openapi.TYPE_OBJECT),
                    },
                ),
            ),
            status.HTTP_401_UNAUTHORIZED: "Invalid credentials or unverified email",
        },
        operation_description="Authenticate user and return JWT tokens",
    )
    def post(self, request):
        serializer = UserLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data["user"]
        refresh = RefreshToken.for_user(user)

        return Response(
            {
                "message": "Login successful",
                "access_token": str(refresh.access_token),
                "refresh_token": str(refresh),
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Logout user",
        operation_description="Logs out a user by blacklisting their refresh token.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=["refresh"],
            properties={
                "refresh": openapi.Schema(
                    type=openapi.TYPE_STRING,
                    description="Refresh token to be blacklisted"
                )
            }
        ),
        responses={
            200: openapi.Response(description="Successfully logged out"),
            400: openapi.Response(description="Invalid or missing refresh token")
        }
    )
    def post(self, request):
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            return Response({'error': 'Refresh token is required.'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError:
            return Response({"error": "Invalid refresh token."}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"message": "Successfully logged out."}, status=status.HTTP_200_OK)


class CurrentUserView(generics.RetrieveUpdateAPIView):
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user


class UserDirectoryView(generics.ListAPIView):
    """Everyone the actor can assign work to or chat with."""
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return User.objects.filter(is_active=True).order_by('name')


# Administration

class AdminUserListCreateView(generics.ListCreateAPIView):
    serializer_class = AdminUserSerializer
    permission_classes = [permissions.IsAuthenticated, capability_required(Capability.MANAGE_USERS)]

    def get_queryset(self):
        return User.objects.order_by('-date_joined', '-id')

    def perform_create(self, serializer):
        email = serializer.validated_data['email']
        if User.objects.filter(email=email).exists():
            raise ConflictError("User already exists.")
        user = serializer.save()
        audit.record(self.request.user, 'create', 'user', user.id, user.email)
        logger.info(f"Admin {self.request.user.email} created user {user.email}")


class AdminUserDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = AdminUserSerializer
    permission_classes = [permissions.IsAuthenticated, capability_required(Capability.MANAGE_USERS)]
    queryset = User.objects.all()

    def perform_update(self, serializer):
        user = serializer.instance
        email = serializer.validated_data.get('email')
        if email and User.objects.filter(email=email).exclude(pk=user.pk).exists():
            raise ConflictError("User already exists.")
        role = serializer.validated_data.get('role')
        if role and role != user.role and user == self.request.user:
            raise ValidationError("Cannot change your own role.")
        previous_role = user.role
        serializer.save()
        if role and role != previous_role:
            audit.record(
                self.request.user, 'role_change', 'user', user.id, user.email,
                details={'from': previous_role, 'to': role},
            )
        logger.info(f"Admin {self.request.user.email} updated user {user.email}")

    def perform_destroy(self, instance):
        if instance == self.request.user:
            raise ValidationError("Cannot delete your own account.")
        audit.record(self.request.user, 'delete', 'user', instance.id, instance.email)
        logger.info(f"Admin {self.request.user.email} deleted user {instance.email}")
        instance.delete()


class AdminUserRoleView(APIView):
    permission_classes = [permissions.IsAuthenticated, capability_required(Capability.MANAGE_USERS)]

    @swagger_auto_schema(
        operation_summary="Change a user's role",
        request_body=RoleUpdateSerializer,
        responses={
            200: AdminUserSerializer,
            400: openapi.Response(description="Invalid role, or attempt to change own role"),
            404: openapi.Response(description="User not found"),
        }
    )
    def patch(self, request, pk):
        serializer = RoleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = serializer.validated_data['role']

        if role not in Role.values:
            raise ValidationError("Invalid role.")

        user = get_object_or_404(User, pk=pk)
        if user == request.user:
            raise ValidationError("Cannot change your own role.")

        previous = user.role
        user.role = role
        user.save(update_fields=['role'])
        audit.record(
            request.user, 'role_change', 'user', user.id, user.email,
            details={'from': previous, 'to': role},
        )
        logger.info(f"Admin {request.user.email} changed role of {user.email} from {previous} to {role}")
        return Response(AdminUserSerializer(user).data, status=status.HTTP_200_OK)


class AdminStatsView(APIView):
    permission_classes = [permissions.IsAuthenticated, capability_required(Capability.MANAGE_USERS)]

    @swagger_auto_schema(
        operation_summary="User statistics",
        responses={200: openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'totalUsers': openapi.Schema(type=openapi.TYPE_INTEGER),
                'teamLeaders': openapi.Schema(type=openapi.TYPE_INTEGER),
                'regularUsers': openapi.Schema(type=openapi.TYPE_INTEGER),
                'admins': openapi.Schema(type=openapi.TYPE_INTEGER),
            },
        )}
    )
    def get(self, request):
        counts = User.objects.aggregate(
            total=Count('id'),
            leaders=Count('id', filter=Q(role=Role.TEAM_LEADER)),
            users=Count('id', filter=Q(role=Role.USER)),
            admins=Count('id', filter=Q(role=Role.ADMIN)),
        )
        return Response({
            'totalUsers': counts['total'],
            'teamLeaders': counts['leaders'],
            'regularUsers': counts['users'],
            'admins': counts['admins'],
        })
