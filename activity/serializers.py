# teamhub/activity/serializers.py
from rest_framework import serializers
from .models import AuditLogEntry


class AuditLogEntrySerializer(serializers.ModelSerializer):
    actor = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = AuditLogEntry
        fields = [
            'id',
            'actor',
            'actor_name',
            'action',
            'entity_type',
            'entity_id',
            'entity_title',
            'details',
            'timestamp',
        ]
        read_only_fields = fields
