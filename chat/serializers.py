from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Chat, Message


class MessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)
    read_by = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'chat', 'sender', 'content', 'read_by', 'created_at']
        read_only_fields = ['chat', 'created_at']


class ChatSerializer(serializers.ModelSerializer):
    participants = UserSummarySerializer(many=True, read_only=True)
    last_message = serializers.SerializerMethodField()
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = [
            'id', 'type', 'name', 'participants', 'admin', 'last_message',
            'unread_count', 'last_message_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_last_message(self, obj):
        message = obj.messages.order_by('-created_at', '-id').select_related('sender').first()
        return MessageSerializer(message).data if message else None

    def get_unread_count(self, obj):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.messages.exclude(read_by=request.user).count()
        return 0


class ChatCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=Chat.TYPE_CHOICES, default='direct')
    name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    participants = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField()


class MemberIdsSerializer(serializers.Serializer):
    userIds = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
