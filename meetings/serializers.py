from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Meeting, MeetingParticipant

User = get_user_model()


class MeetingParticipantSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = MeetingParticipant
        fields = ['user', 'status']
        read_only_fields = fields


class MeetingSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    participants = MeetingParticipantSerializer(many=True, read_only=True)
    participant_ids = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        many=True,
        write_only=True,
        required=False
    )

    class Meta:
        model = Meeting
        fields = [
            'id', 'title', 'agenda', 'date', 'duration', 'participants', 'participant_ids',
            'created_by', 'meeting_link', 'recurring', 'recurring_pattern', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        recurring = attrs.get('recurring', getattr(self.instance, 'recurring', False))
        pattern = attrs.get('recurring_pattern', getattr(self.instance, 'recurring_pattern', None))
        if recurring and not pattern:
            raise serializers.ValidationError({'recurring_pattern': 'Recurring meetings need a pattern.'})
        if not recurring:
            attrs['recurring_pattern'] = None
        return attrs

    def create(self, validated_data):
        users = validated_data.pop('participant_ids', [])
        with transaction.atomic():
            meeting = Meeting.objects.create(**validated_data)
            MeetingParticipant.objects.bulk_create([MeetingParticipant(meeting=meeting, user=u) for u in set(users)])
        return meeting

    def update(self, instance, validated_data):
        """Replacing the participant list keeps the answers of people who stay invited."""
        users = validated_data.pop('participant_ids', None)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if users is not None:
                wanted = {u.id for u in users}
                instance.participants.exclude(user_id__in=wanted).delete()
                existing = set(instance.participants.values_list('user_id', flat=True))
                MeetingParticipant.objects.bulk_create(
                    [MeetingParticipant(meeting=instance, user_id=uid) for uid in wanted - existing]
                )
        return instance


class MeetingResponseSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MeetingParticipant.STATUS_CHOICES)
