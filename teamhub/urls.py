from django.contrib import admin
from django.urls import path, include
from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

schema_view = get_schema_view(
    openapi.Info(
        title="TeamHub API",
        default_version='v1',
        description="Tasks with stage tracking, ideas, resources, projects, chat, meetings and music",
    ),
    public=True,
    permission_classes=[permissions.AllowAny],
)

urlpatterns = [
    path('django-admin/', admin.site.urls),
    path('api/accounts/', include('accounts.urls')),
    path('api/admin/', include('accounts.admin_urls')),
    path('api/activity/', include('activity.urls')),
    path('api/tasks/', include('tasks.urls')),
    path('api/ideas/', include('ideas.urls')),
    path('api/resources/', include('resources.urls')),
    path('api/projects/', include('projects.urls')),
    path('api/chat/', include('chat.urls')),
    path('api/meetings/', include('meetings.urls')),
    path('api/music/', include('music.urls')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
