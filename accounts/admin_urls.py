from django.urls import path

from .views import AdminUserListCreateView, AdminUserDetailView, AdminUserRoleView, AdminStatsView


urlpatterns = [
    path('users/', AdminUserListCreateView.as_view(), name='admin-user-list'),
    path('users/<int:pk>/', AdminUserDetailView.as_view(), name='admin-user-detail'),
    path('users/<int:pk>/role/', AdminUserRoleView.as_view(), name='admin-user-role'),
    path('stats/', AdminStatsView.as_view(), name='admin-stats'),
]
