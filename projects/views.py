# teamhub/projects/views.py
import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema

from accounts.permissions import Capability, require_capability
from activity import services as audit
from realtime.publisher import PROJECTS, publish
from .models import Project, TimelineEntry
from .serializers import ProjectSerializer, TimelineEntrySerializer

logger = logging.getLogger(__name__)


def project_queryset():
    return Project.objects.select_related('created_by').prefetch_related('timeline_entries')


class ProjectListCreateView(generics.ListCreateAPIView):
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return project_queryset()

    def perform_create(self, serializer):
        require_capability(self.request.user, Capability.MANAGE_PROJECTS)
        project = serializer.save(created_by=self.request.user, last_modified_by=self.request.user)
        logger.info(f"Project {project.id} '{project.title}' created by {self.request.user.email}")
        publish(PROJECTS, 'newProject', serializer.data)


class ProjectDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return project_queryset()

    def perform_update(self, serializer):
        require_capability(self.request.user, Capability.MANAGE_PROJECTS)
        serializer.save(last_modified_by=self.request.user)
        publish(PROJECTS, 'projectUpdated', serializer.data)

    def perform_destroy(self, instance):
        require_capability(self.request.user, Capability.MANAGE_PROJECTS)
        project_id = instance.id
        with transaction.atomic():
            audit.record(self.request.user, 'delete', 'project', project_id, instance.title)
            instance.delete()
        publish(PROJECTS, 'projectDeleted', {'id': project_id})

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Project deleted'}, status=status.HTTP_200_OK)


def touched(project, user):
    project.last_modified_by = user
    project.save(update_fields=['last_modified_by', 'updated_at'])
    data = ProjectSerializer(project_queryset().get(pk=project.pk)).data
    publish(PROJECTS, 'projectUpdated', data)
    return data


class TimelineEntryCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Add a timeline entry",
        request_body=TimelineEntrySerializer,
        responses={201: ProjectSerializer}
    )
    def post(self, request, pk):
        require_capability(request.user, Capability.MANAGE_PROJECTS)
        project = get_object_or_404(Project, pk=pk)
        serializer = TimelineEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(project=project)
        return Response(touched(project, request.user), status=status.HTTP_201_CREATED)


class TimelineEntryDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get_entry(self, project_id, entry_id):
        project = get_object_or_404(Project, pk=project_id)
        entry = get_object_or_404(TimelineEntry, pk=entry_id, project=project)
        return project, entry

    @swagger_auto_schema(
        operation_summary="Edit a timeline entry",
        request_body=TimelineEntrySerializer,
        responses={200: ProjectSerializer}
    )
    def patch(self, request, project_id, entry_id):
        require_capability(request.user, Capability.MANAGE_PROJECTS)
        project, entry = self.get_entry(project_id, entry_id)
        serializer = TimelineEntrySerializer(entry, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(touched(project, request.user))

    put = patch

    @swagger_auto_schema(operation_summary="Delete a timeline entry", responses={200: ProjectSerializer})
    def delete(self, request, project_id, entry_id):
        require_capability(request.user, Capability.MANAGE_PROJECTS)
        project, entry = self.get_entry(project_id, entry_id)
        entry.delete()
        return Response(touched(project, request.user))
