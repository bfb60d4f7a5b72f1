from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Idea, IdeaComment


class IdeaCommentSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = IdeaComment
        fields = ['id', 'author', 'comment', 'created_at']
        read_only_fields = ['author', 'created_at']
        extra_kwargs = {
            'comment': {'required': True, 'allow_blank': False, 'trim_whitespace': True}
        }


class IdeaSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    votes = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    vote_count = serializers.SerializerMethodField()
    comments = IdeaCommentSerializer(many=True, read_only=True)

    class Meta:
        model = Idea
        fields = [
            'id', 'title', 'description', 'resource_link', 'votes', 'vote_count',
            'comments', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_vote_count(self, obj):
        return obj.votes.count()
