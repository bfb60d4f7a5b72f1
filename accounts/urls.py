from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    UserRegistrationView, VerifyEmailView, ResendVerificationEmailView, UserLoginView,
    LogoutView, CurrentUserView, UserDirectoryView,
)


urlpatterns = [
    path('register/', UserRegistrationView.as_view(), name='user_register'),
    path('verify/<int:user_id>/<str:token>/', VerifyEmailView.as_view(), name='verify-email'),
    path('verify/resend/', ResendVerificationEmailView.as_view(), name='resend-verification'),
    path("login/", UserLoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('me/', CurrentUserView.as_view(), name='current-user'),
    path('users/', UserDirectoryView.as_view(), name='user-directory'),
]
