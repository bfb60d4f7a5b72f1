# teamhub/tasks/views.py
from django.db import models
from rest_framework import generics, permissions, filters, status
from rest_framework.views import APIView
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from accounts.permissions import Capability, has_capability, require_capability
from teamhub.exceptions import AuthorizationError
from . import services
from .models import Task
from .serializers import (
    TaskSerializer, StageSerializer, StageContentSerializer,
    StageMoveSerializer, StageContentWriteSerializer,
)


def can_work_on(user, task):
    """Task managers, the creator, the team leader and assignees may edit a task."""
    if has_capability(user, Capability.MANAGE_TASKS):
        return True
    if task.created_by_id == user.id or task.team_leader_id == user.id:
        return True
    return task.assignees.filter(id=user.id).exists()


def visible_tasks(user):
    if has_capability(user, Capability.MANAGE_TASKS):
        return Task.objects.all()
    return Task.objects.filter(
        models.Q(created_by=user) |
        models.Q(assignees=user) |
        models.Q(team_leader=user)
    ).distinct()


class TaskListCreateView(generics.ListCreateAPIView):
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['status', 'priority', 'category']
    ordering_fields = ['deadline', 'priority', 'created_at']

    def get_queryset(self):
        user = self.request.user
        # the list only shows the actor's own work, whatever their role
        return Task.objects.filter(
            models.Q(created_by=user) |
            models.Q(assignees=user) |
            models.Q(team_leader=user)
        ).distinct().select_related('created_by').prefetch_related('assignees', 'status_history__actor')

    def perform_create(self, serializer):
        require_capability(
            self.request.user, Capability.MANAGE_TASKS,
            "Access denied. Only admins and team leaders can perform this action."
        )
        services.create_task(serializer, self.request.user)


class TaskDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return visible_tasks(self.request.user)

    def perform_update(self, serializer):
        if not can_work_on(self.request.user, serializer.instance):
            raise AuthorizationError("Not authorized to edit this task")
        services.update_task(serializer, self.request.user)

    def perform_destroy(self, instance):
        require_capability(
            self.request.user, Capability.MANAGE_TASKS,
            "Access denied. Only admins and team leaders can perform this action."
        )
        services.delete_task(instance, self.request.user)

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Task deleted successfully'}, status=status.HTTP_200_OK)


class TaskStageView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Move a task to a stage",
        operation_description=(
            "Moving forward completes every earlier stage, moving back reopens every later stage. "
            "Staying in place completes the stage when isLastStage is set, or reopens it when "
            "isFirstStage is set. expectedVersion guards against concurrent edits."
        ),
        request_body=StageMoveSerializer,
        responses={
            200: TaskSerializer,
            400: openapi.Response(description="Invalid stage or stale version"),
            404: openapi.Response(description="Task not found"),
        }
    )
    def put(self, request, task_id):
        serializer = StageMoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        task = services.get_task(task_id)
        if not can_work_on(request.user, task):
            raise AuthorizationError("Not authorized to edit this task")

        task = services.move_to_stage(
            task.id, data['stage'], request.user,
            is_last_stage=data['isLastStage'],
            is_first_stage=data['isFirstStage'],
            expected_version=data.get('expectedVersion'),
        )
        return Response(TaskSerializer(task).data, status=status.HTTP_200_OK)


class TaskStageListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="List a task's stages with completion flags",
        responses={200: StageSerializer(many=True), 404: openapi.Response(description="Task not found")}
    )
    def get(self, request, task_id):
        task = services.get_task(task_id)
        if not can_work_on(request.user, task):
            raise AuthorizationError("Not authorized to view this task")

        stages = services.list_stages(task.id)
        return Response(StageSerializer(stages, many=True).data)


class StageContentSaveView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Save stage content",
        request_body=StageContentWriteSerializer,
        responses={
            200: StageContentSerializer,
            400: openapi.Response(description="Invalid stage name"),
            403: openapi.Response(description="Not allowed to edit this task"),
            404: openapi.Response(description="Task not found"),
        }
    )
    def post(self, request):
        serializer = StageContentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        task = services.get_task(data['taskId'])
        if not can_work_on(request.user, task):
            raise AuthorizationError("Not authorized to edit this task")

        stage = services.save_stage_content(task.id, data['stageName'], data['content'])
        return Response(StageContentSerializer(stage).data, status=status.HTTP_200_OK)


class StageContentDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, task_id, stage_name):
        task = services.get_task(task_id)
        if not can_work_on(request.user, task):
            raise AuthorizationError("Not authorized to view this task")

        stage = services.get_stage_content(task.id, stage_name)
        if stage is None:
            return Response({'content': '', 'is_completed': False})
        return Response(StageContentSerializer(stage).data)


class TaskStatusHistoryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Status change feed",
        operation_description="Status changes across all tasks plus task deletions, newest first.",
    )
    def get(self, request):
        return Response(services.status_history_feed())
