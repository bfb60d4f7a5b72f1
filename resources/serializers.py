from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Resource


class ResourceSerializer(serializers.ModelSerializer):
    uploaded_by = UserSummarySerializer(read_only=True)
    likes = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    like_count = serializers.SerializerMethodField()
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50, trim_whitespace=True),
        required=False
    )

    class Meta:
        model = Resource
        fields = [
            'id', 'title', 'description', 'type', 'url', 'tags',
            'uploaded_by', 'likes', 'like_count', 'views', 'created_at', 'updated_at'
        ]
        read_only_fields = ['views', 'created_at', 'updated_at']

    def validate_tags(self, value):
        tags = []
        for tag in value:
            tag = tag.lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    def get_like_count(self, obj):
        return obj.likes.count()
