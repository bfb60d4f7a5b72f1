from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from chat import services as chat_services
from meetings.models import Meeting, MeetingParticipant
from .consumers import NotificationConsumer, topic_allowed
from .auth import JWTQueryAuthMiddleware
from .publisher import EVENT_TYPE, publish

User = get_user_model()


class ScopeUser:
    """Puts a fixed user into the connection scope."""

    def __init__(self, inner, user):
        self.inner = inner
        self.user = user

    async def __call__(self, scope, receive, send):
        return await self.inner(dict(scope, user=self.user), receive, send)


class PublisherTest(SimpleTestCase):
    def test_publish_reaches_group_members(self):
        layer = get_channel_layer()
        channel = async_to_sync(layer.new_channel)()
        async_to_sync(layer.group_add)('ideas', channel)

        publish('ideas', 'newIdea', {'id': 1})

        message = async_to_sync(layer.receive)(channel)
        self.assertEqual(message, {'type': EVENT_TYPE, 'topic': 'ideas', 'event': 'newIdea', 'payload': {'id': 1}})
        async_to_sync(layer.group_discard)('ideas', channel)

    def test_publish_without_subscribers_does_not_raise(self):
        publish('chat_123', 'newMessage', {'content': 'hi'})


class NotificationConsumerTest(SimpleTestCase):
    def setUp(self):
        self.user = User(id=42, email='socket@example.com', name='Socket')

    def communicator(self):
        app = ScopeUser(NotificationConsumer.as_asgi(), self.user)
        return WebsocketCommunicator(app, '/ws/notifications/')

    async def test_receives_events_for_own_user_topic(self):
        communicator = self.communicator()
        connected, _ = await communicator.connect()
        self.assertTrue(connected)

        await get_channel_layer().group_send('user_42', {
            'type': EVENT_TYPE, 'topic': 'user_42', 'event': 'taskUpdated', 'payload': {'id': 5}
        })
        self.assertEqual(
            await communicator.receive_json_from(),
            {'event': 'taskUpdated', 'topic': 'user_42', 'payload': {'id': 5}}
        )
        await communicator.disconnect()

    async def test_subscribe_to_public_topic(self):
        communicator = self.communicator()
        await communicator.connect()
        await communicator.send_json_to({'action': 'subscribe', 'topic': 'music'})
        self.assertEqual(await communicator.receive_json_from(), {'subscribed': 'music'})

        await get_channel_layer().group_send('music', {
            'type': EVENT_TYPE, 'topic': 'music', 'event': 'newMusic', 'payload': {'id': 1}
        })
        response = await communicator.receive_json_from()
        self.assertEqual(response['event'], 'newMusic')

        await communicator.send_json_to({'action': 'unsubscribe', 'topic': 'music'})
        self.assertEqual(await communicator.receive_json_from(), {'unsubscribed': 'music'})
        await communicator.disconnect()

    async def test_cannot_subscribe_to_another_users_topic(self):
        communicator = self.communicator()
        await communicator.connect()
        await communicator.send_json_to({'action': 'subscribe', 'topic': 'user_7'})
        response = await communicator.receive_json_from()
        self.assertEqual(response['code'], 'forbidden')
        await communicator.disconnect()

    async def test_unknown_action(self):
        communicator = self.communicator()
        await communicator.connect()
        await communicator.send_json_to({'action': 'shout', 'topic': 'ideas'})
        response = await communicator.receive_json_from()
        self.assertEqual(response['code'], 'invalid')
        await communicator.disconnect()

    async def test_connection_without_token_is_rejected(self):
        app = JWTQueryAuthMiddleware(NotificationConsumer.as_asgi())
        communicator = WebsocketCommunicator(app, '/ws/notifications/')
        connected, _ = await communicator.connect()
        self.assertFalse(connected)


class TopicAllowedTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', password='testpass123', name='Alice')
        self.bob = User.objects.create_user(email='bob@example.com', password='testpass123', name='Bob')
        self.carol = User.objects.create_user(email='carol@example.com', password='testpass123', name='Carol')

    def test_public_and_personal_topics(self):
        self.assertTrue(topic_allowed(self.alice, 'ideas'))
        self.assertTrue(topic_allowed(self.alice, f'user_{self.alice.id}'))
        self.assertFalse(topic_allowed(self.alice, f'user_{self.bob.id}'))
        self.assertFalse(topic_allowed(self.alice, 'secret'))

    def test_chat_topic_needs_membership(self):
        chat = chat_services.create_chat(self.alice, 'direct', [self.bob.id])
        self.assertTrue(topic_allowed(self.bob, f'chat_{chat.id}'))
        self.assertFalse(topic_allowed(self.carol, f'chat_{chat.id}'))
        self.assertFalse(topic_allowed(self.alice, 'chat_abc'))

    def test_meeting_topic_for_creator_and_participants(self):
        meeting = Meeting.objects.create(
            title='Sync', agenda='x', date=timezone.now(), duration=30, created_by=self.alice
        )
        MeetingParticipant.objects.create(meeting=meeting, user=self.bob)
        self.assertTrue(topic_allowed(self.alice, f'meeting_{meeting.id}'))
        self.assertTrue(topic_allowed(self.bob, f'meeting_{meeting.id}'))
        self.assertFalse(topic_allowed(self.carol, f'meeting_{meeting.id}'))
