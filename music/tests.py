from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from .models import Music

User = get_user_model()

EMBED = '<iframe src="https://w.soundcloud.com/player/?url=track"></iframe>'


class MusicViewsTest(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@example.com', password='testpass123', name='Admin', role=Role.ADMIN
        )
        self.leader = User.objects.create_user(
            email='lead@example.com', password='testpass123', name='Lead', role=Role.TEAM_LEADER
        )
        self.client.force_authenticate(user=self.admin)
        self.track = Music.objects.create(title='Focus', embed_code=EMBED, added_by=self.admin)
        Music.objects.create(title='Retired', embed_code=EMBED, added_by=self.admin, is_active=False)

    def test_list_only_active(self):
        self.client.force_authenticate(user=self.leader)
        response = self.client.get(reverse('music-list-create'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['title'] for m in response.data], ['Focus'])

    @mock.patch('music.views.publish')
    def test_admin_adds_music(self, publish):
        response = self.client.post(reverse('music-list-create'), {'title': 'Lo-fi', 'embed_code': EMBED}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['added_by']['id'], self.admin.id)
        self.assertEqual(publish.call_args[0][:2], ('music', 'newMusic'))

    def test_rejects_non_soundcloud_embed(self):
        data = {'title': 'Bad', 'embed_code': '<iframe src="https://example.com/player"></iframe>'}
        response = self.client.post(reverse('music-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['embed_code'], ['Invalid SoundCloud embed code'])

    def test_leader_cannot_manage_music(self):
        self.client.force_authenticate(user=self.leader)
        response = self.client.post(reverse('music-list-create'), {'title': 'x', 'embed_code': EMBED}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(reverse('music-detail', args=[self.track.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_deactivate_and_delete(self):
        url = reverse('music-detail', args=[self.track.id])
        response = self.client.patch(url, {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Music.objects.filter(id=self.track.id).exists())
