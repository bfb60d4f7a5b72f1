# teamhub/resources/views.py
import logging

from django.db import transaction
from django.db.models import F
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, filters, status
from rest_framework.views import APIView
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from accounts.permissions import Capability, can_modify_owned, require_capability
from activity import services as audit
from realtime.publisher import RESOURCES, publish
from teamhub.exceptions import AuthorizationError
from .filters import ResourceFilter
from .models import Resource
from .serializers import ResourceSerializer

logger = logging.getLogger(__name__)


class ResourceListCreateView(generics.ListCreateAPIView):
    serializer_class = ResourceSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ResourceFilter
    ordering_fields = ['created_at', 'views', 'title']
    ordering = ['-created_at', '-id']

    def get_queryset(self):
        return Resource.objects.select_related('uploaded_by').prefetch_related('likes')

    def perform_create(self, serializer):
        require_capability(self.request.user, Capability.SHARE_RESOURCES)
        resource = serializer.save(uploaded_by=self.request.user)
        logger.info(f"Resource {resource.id} '{resource.title}' shared by {self.request.user.email}")
        publish(RESOURCES, 'newResource', serializer.data)


class ResourceDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = ResourceSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Resource.objects.select_related('uploaded_by').prefetch_related('likes')

    def check_owner(self, resource, verb):
        if not can_modify_owned(self.request.user, resource.uploaded_by_id):
            raise AuthorizationError(f"Not authorized to {verb} this resource")

    def perform_update(self, serializer):
        self.check_owner(serializer.instance, 'update')
        serializer.save()
        publish(RESOURCES, 'resourceUpdated', serializer.data)

    def perform_destroy(self, instance):
        self.check_owner(instance, 'delete')
        resource_id = instance.id
        with transaction.atomic():
            audit.record(self.request.user, 'delete', 'resource', resource_id, instance.title)
            instance.delete()
        publish(RESOURCES, 'resourceDeleted', {'id': resource_id})

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Resource deleted successfully'}, status=status.HTTP_200_OK)


class ResourceLikeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(operation_summary="Toggle the current user's like", responses={200: ResourceSerializer})
    def post(self, request, pk):
        resource = get_object_or_404(Resource, pk=pk)
        if resource.likes.filter(pk=request.user.pk).exists():
            resource.likes.remove(request.user)
        else:
            resource.likes.add(request.user)

        likes = list(resource.likes.values_list('id', flat=True))
        publish(RESOURCES, 'resourceLiked', {'resourceId': resource.id, 'likes': likes})
        return Response(ResourceSerializer(resource).data, status=status.HTTP_200_OK)


class ResourceViewCountView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Record a view",
        request_body=None,
        responses={200: openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={'views': openapi.Schema(type=openapi.TYPE_INTEGER)}
        )}
    )
    def post(self, request, pk):
        updated = Resource.objects.filter(pk=pk).update(views=F('views') + 1)
        if not updated:
            return Response({'error': 'Resource not found'}, status=status.HTTP_404_NOT_FOUND)
        views = Resource.objects.values_list('views', flat=True).get(pk=pk)
        return Response({'views': views}, status=status.HTTP_200_OK)
