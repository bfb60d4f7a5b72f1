from django.db import transaction
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Project, TimelineEntry


class TimelineEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = TimelineEntry
        fields = ['id', 'date', 'title', 'description', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ProjectSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    timeline_entries = TimelineEntrySerializer(many=True, required=False)

    class Meta:
        model = Project
        fields = ['id', 'title', 'image_url', 'timeline_entries', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def create(self, validated_data):
        """Create the project together with any initial timeline entries."""
        entries = validated_data.pop('timeline_entries', [])
        with transaction.atomic():
            project = Project.objects.create(**validated_data)
            TimelineEntry.objects.bulk_create([TimelineEntry(project=project, **entry) for entry in entries])
        return project

    def update(self, instance, validated_data):
        # timeline entries have their own endpoints
        validated_data.pop('timeline_entries', None)
        return super().update(instance, validated_data)
