# teamhub/realtime/consumers.py
import logging

from channels.generic.websocket import JsonWebsocketConsumer
from asgiref.sync import async_to_sync

from chat.models import Chat
from meetings.models import Meeting
from .publisher import PUBLIC_TOPICS, user_topic

logger = logging.getLogger(__name__)


def _topic_id(topic, prefix):
    suffix = topic[len(prefix):]
    return int(suffix) if suffix.isdigit() else None


def topic_allowed(user, topic):
    """Whether user may listen on topic."""
    if topic in PUBLIC_TOPICS:
        return True
    if topic.startswith('user_'):
        return topic == user_topic(user.id)
    if topic.startswith('chat_'):
        chat_id = _topic_id(topic, 'chat_')
        return chat_id is not None and Chat.objects.filter(id=chat_id, participants=user).exists()
    if topic.startswith('meeting_'):
        meeting_id = _topic_id(topic, 'meeting_')
        if meeting_id is None:
            return False
        meetings = Meeting.objects.filter(id=meeting_id)
        return (
            meetings.filter(created_by=user).exists()
            or meetings.filter(participants__user=user).exists()
        )
    return False


class NotificationConsumer(JsonWebsocketConsumer):
    """One socket per client. Always joined to the user's own topic."""

    def connect(self):
        user = self.scope.get('user')
        if user is None or not user.is_authenticated:
            self.close()
            return
        self.topics = set()
        self.accept()
        self.join(user_topic(user.id))

    def disconnect(self, code):
        for topic in list(getattr(self, 'topics', ())):
            async_to_sync(self.channel_layer.group_discard)(topic, self.channel_name)
        self.topics = set()

    def join(self, topic):
        async_to_sync(self.channel_layer.group_add)(topic, self.channel_name)
        self.topics.add(topic)

    def receive_json(self, content, **kwargs):
        action = content.get('action') if isinstance(content, dict) else None
        topic = content.get('topic') if isinstance(content, dict) else None
        if action not in ('subscribe', 'unsubscribe') or not isinstance(topic, str):
            self.send_json({'error': 'Unknown action', 'code': 'invalid'})
            return

        if action == 'unsubscribe':
            if topic in self.topics and topic != user_topic(self.scope['user'].id):
                async_to_sync(self.channel_layer.group_discard)(topic, self.channel_name)
                self.topics.discard(topic)
            self.send_json({'unsubscribed': topic})
            return

        if not topic_allowed(self.scope['user'], topic):
            logger.info(f"User {self.scope['user'].id} denied subscription to {topic}")
            self.send_json({'error': f'Not allowed to subscribe to {topic}', 'code': 'forbidden'})
            return
        self.join(topic)
        self.send_json({'subscribed': topic})

    def fanout_event(self, message):
        self.send_json({
            'event': message['event'],
            'topic': message['topic'],
            'payload': message['payload'],
        })
