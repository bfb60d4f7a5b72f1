# teamhub/tasks/serializers.py
from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Task, Stage, StatusChange

User = get_user_model()


class StatusChangeSerializer(serializers.ModelSerializer):
    actor = UserSummarySerializer(read_only=True)

    class Meta:
        model = StatusChange
        fields = ['status', 'actor', 'timestamp']
        read_only_fields = fields


class TaskSerializer(serializers.ModelSerializer):
    assignees = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        many=True,
        required=False
    )
    team_leader = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        allow_null=True,
        required=False
    )
    assignee_details = UserSummarySerializer(source='assignees', many=True, read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    status_history = StatusChangeSerializer(many=True, read_only=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    stages = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    expected_version = serializers.IntegerField(write_only=True, required=False, min_value=1)

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'deadline', 'status', 'priority',
            'category', 'tags', 'assignees', 'assignee_details', 'team_leader',
            'stages', 'current_stage', 'stage_descriptions', 'status_history',
            'created_by', 'version', 'created_at', 'updated_at', 'expected_version'
        ]
        read_only_fields = ['created_by', 'version', 'created_at', 'updated_at']

    def validate_stages(self, value):
        if not value:
            raise serializers.ValidationError("A task needs at least one stage.")
        if len(set(value)) != len(value):
            raise serializers.ValidationError("Stage names must be unique.")
        return value

    def validate(self, attrs):
        if self.instance is not None:
            # the stage list and pointer only change through the stage tracker
            attrs.pop('stages', None)
            attrs.pop('current_stage', None)
            return attrs

        attrs.pop('expected_version', None)
        stages = attrs.get('stages') or list(Task._meta.get_field('stages').get_default())
        current_stage = attrs.get('current_stage') or stages[0]
        if current_stage not in stages:
            raise serializers.ValidationError({'current_stage': 'Stage must be one of the defined stages'})
        attrs['stages'] = stages
        attrs['current_stage'] = current_stage
        return attrs


class StageSerializer(serializers.ModelSerializer):
    stageName = serializers.CharField(source='stage_name', read_only=True)
    isCompleted = serializers.BooleanField(source='is_completed', read_only=True)

    class Meta:
        model = Stage
        fields = ['stageName', 'isCompleted']


class StageContentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Stage
        fields = ['task', 'stage_name', 'content', 'is_completed', 'updated_at']
        read_only_fields = fields


class StageMoveSerializer(serializers.Serializer):
    stage = serializers.CharField()
    isLastStage = serializers.BooleanField(required=False, default=False)
    isFirstStage = serializers.BooleanField(required=False, default=False)
    expectedVersion = serializers.IntegerField(required=False, min_value=1)


class StageContentWriteSerializer(serializers.Serializer):
    taskId = serializers.IntegerField()
    stageName = serializers.CharField()
    content = serializers.CharField(allow_blank=True, required=False, default='')
