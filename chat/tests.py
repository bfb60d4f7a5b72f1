from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from teamhub.exceptions import ConflictError, ValidationError
from . import services
from .models import Chat, Message

User = get_user_model()


class ChatServiceTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', password='testpass123', name='Alice')
        self.bob = User.objects.create_user(email='bob@example.com', password='testpass123', name='Bob')
        self.carol = User.objects.create_user(email='carol@example.com', password='testpass123', name='Carol')

    def test_direct_key_is_order_independent(self):
        self.assertEqual(services.direct_key(7, 3), services.direct_key(3, 7))

    def test_direct_chat_deduplicated_per_pair(self):
        services.create_chat(self.alice, 'direct', [self.bob.id])
        with self.assertRaises(ConflictError):
            services.create_chat(self.bob, 'direct', [self.alice.id])

    def test_direct_chat_needs_two_participants(self):
        with self.assertRaises(ValidationError):
            services.create_chat(self.alice, 'direct', [self.bob.id, self.carol.id])
        with self.assertRaises(ValidationError):
            services.create_chat(self.alice, 'direct', [])

    def test_group_needs_name_and_creator_is_admin(self):
        with self.assertRaises(ValidationError):
            services.create_chat(self.alice, 'group', [self.bob.id], name='  ')
        chat = services.create_chat(self.alice, 'group', [self.bob.id, self.carol.id], name='Team')
        self.assertEqual(chat.admin, self.alice)
        self.assertEqual(chat.participants.count(), 3)

    @mock.patch('chat.services.publish_to_users')
    @mock.patch('chat.services.publish')
    def test_send_message_fans_out(self, publish, publish_to_users):
        chat = services.create_chat(self.alice, 'group', [self.bob.id, self.carol.id], name='Team')
        message = services.send_message(chat, self.alice, 'Hello')
        self.assertEqual(list(message.read_by.all()), [self.alice])
        publish.assert_called_once()
        self.assertEqual(publish.call_args[0][:2], (f'chat_{chat.id}', 'newMessage'))
        recipients, event, payload = publish_to_users.call_args[0]
        self.assertEqual(sorted(recipients), sorted([self.bob.id, self.carol.id]))
        self.assertEqual(event, 'chatNotification')
        self.assertEqual(payload['chatId'], chat.id)

    def test_mark_read(self):
        chat = services.create_chat(self.alice, 'direct', [self.bob.id])
        services.send_message(chat, self.alice, 'one')
        services.send_message(chat, self.alice, 'two')
        self.assertEqual(services.mark_read(chat, self.bob), 2)
        self.assertEqual(services.mark_read(chat, self.bob), 0)
        self.assertEqual(Message.objects.filter(read_by=self.bob).count(), 2)


class ChatViewsTest(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', password='testpass123', name='Alice')
        self.bob = User.objects.create_user(email='bob@example.com', password='testpass123', name='Bob')
        self.carol = User.objects.create_user(email='carol@example.com', password='testpass123', name='Carol')
        self.client.force_authenticate(user=self.alice)

    def create_group(self):
        data = {'type': 'group', 'name': 'Team', 'participants': [self.bob.id]}
        return self.client.post(reverse('chat-list-create'), data, format='json')

    def test_create_and_list(self):
        response = self.client.post(
            reverse('chat-list-create'), {'participants': [self.bob.id]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['type'], 'direct')

        response = self.client.post(
            reverse('chat-list-create'), {'participants': [self.bob.id]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'conflict')

        response = self.client.get(reverse('chat-list-create'))
        self.assertEqual(len(response.data), 1)

        self.client.force_authenticate(user=self.carol)
        response = self.client.get(reverse('chat-list-create'))
        self.assertEqual(len(response.data), 0)

    def test_messages_and_unread(self):
        chat_id = self.create_group().data['id']
        response = self.client.post(reverse('chat-messages', args=[chat_id]), {'content': 'Hi Bob'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['read_by'], [self.alice.id])

        self.client.force_authenticate(user=self.bob)
        response = self.client.get(reverse('chat-detail', args=[chat_id]))
        self.assertEqual(response.data['unread_count'], 1)
        self.assertEqual(response.data['last_message']['content'], 'Hi Bob')

        response = self.client.post(reverse('chat-read', args=[chat_id]))
        self.assertEqual(response.data, {'marked': 1})
        response = self.client.get(reverse('chat-messages', args=[chat_id]))
        self.assertEqual(sorted(response.data[0]['read_by']), sorted([self.alice.id, self.bob.id]))

    def test_empty_message_rejected(self):
        chat_id = self.create_group().data['id']
        response = self.client.post(reverse('chat-messages', args=[chat_id]), {'content': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_member_gets_not_found(self):
        chat_id = self.create_group().data['id']
        self.client.force_authenticate(user=self.carol)
        response = self.client.get(reverse('chat-messages', args=[chat_id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_group_membership_management(self):
        chat_id = self.create_group().data['id']
        url = reverse('chat-members', args=[chat_id])

        response = self.client.post(url, {'userIds': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'userIds': [self.carol.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['participants']), 3)

        # members cannot remove others, but can leave
        self.client.force_authenticate(user=self.bob)
        response = self.client.delete(reverse('chat-member-detail', args=[chat_id, self.carol.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(reverse('chat-member-detail', args=[chat_id, self.alice.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(reverse('chat-member-detail', args=[chat_id, self.bob.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.alice)
        response = self.client.delete(reverse('chat-member-detail', args=[chat_id, self.alice.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_admin_deletes_group(self):
        chat_id = self.create_group().data['id']
        self.client.force_authenticate(user=self.bob)
        response = self.client.delete(reverse('chat-detail', args=[chat_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.alice)
        response = self.client.delete(reverse('chat-detail', args=[chat_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Chat.objects.filter(id=chat_id).exists())

    def test_either_participant_deletes_direct_chat(self):
        chat = services.create_chat(self.alice, 'direct', [self.bob.id])
        self.client.force_authenticate(user=self.bob)
        response = self.client.delete(reverse('chat-detail', args=[chat.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_available_users_excludes_self(self):
        response = self.client.get(reverse('chat-available-users'))
        self.assertEqual([u['name'] for u in response.data], ['Bob', 'Carol'])
