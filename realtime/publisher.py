"""Best-effort fan-out of JSON events to named topics over the channel layer."""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

IDEAS = 'ideas'
RESOURCES = 'resources'
PROJECTS = 'projects'
MUSIC = 'music'

PUBLIC_TOPICS = frozenset({IDEAS, RESOURCES, PROJECTS, MUSIC})

# consumers route messages of this type to NotificationConsumer.fanout_event
EVENT_TYPE = 'fanout.event'


def chat_topic(chat_id):
    return f'chat_{chat_id}'


def meeting_topic(meeting_id):
    return f'meeting_{meeting_id}'


def user_topic(user_id):
    return f'user_{user_id}'


def publish(topic, event, payload):
    """Send one event to every subscriber of topic. Failures are logged, never raised."""
    layer = get_channel_layer()
    if layer is None:
        logger.warning(f"No channel layer configured, dropped '{event}' for {topic}")
        return
    try:
        async_to_sync(layer.group_send)(topic, {
            'type': EVENT_TYPE,
            'topic': topic,
            'event': event,
            'payload': payload,
        })
    except Exception as e:
        logger.warning(f"Failed to publish '{event}' to {topic}: {e}")


def publish_to_users(user_ids, event, payload):
    for user_id in user_ids:
        publish(user_topic(user_id), event, payload)
