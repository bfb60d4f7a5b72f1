from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Music


class MusicSerializer(serializers.ModelSerializer):
    added_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Music
        fields = ['id', 'title', 'embed_code', 'added_by', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_embed_code(self, value):
        # SoundCloud iframe players only
        lowered = value.lower()
        if 'iframe' not in lowered or 'soundcloud' not in lowered:
            raise serializers.ValidationError("Invalid SoundCloud embed code")
        return value
