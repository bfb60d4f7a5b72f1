from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from activity.models import AuditLogEntry
from .models import Idea

User = get_user_model()


class IdeaViewsTest(APITestCase):
    def setUp(self):
        self.author = User.objects.create_user(email='author@example.com', password='testpass123', name='Author')
        self.other = User.objects.create_user(email='other@example.com', password='testpass123', name='Other')
        self.leader = User.objects.create_user(
            email='lead@example.com', password='testpass123', name='Lead', role=Role.TEAM_LEADER
        )
        self.client.force_authenticate(user=self.author)
        self.idea = Idea.objects.create(title='Hack day', description='Monthly hack day', created_by=self.author)

    @mock.patch('ideas.views.publish')
    def test_create_idea_publishes(self, publish):
        data = {'title': 'Standups', 'description': 'Async standups', 'resource_link': 'https://example.com/a'}
        response = self.client.post(reverse('idea-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by']['id'], self.author.id)
        publish.assert_called_once()
        self.assertEqual(publish.call_args[0][:2], ('ideas', 'newIdea'))

    def test_invalid_resource_link(self):
        data = {'title': 'Bad', 'description': 'x', 'resource_link': 'ftp://example.com'}
        response = self.client.post(reverse('idea-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('resource_link', response.data)

    def test_list_newest_first(self):
        Idea.objects.create(title='Newer', description='x', created_by=self.other)
        response = self.client.get(reverse('idea-list-create'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['title'], 'Newer')

    def test_vote_toggles(self):
        url = reverse('idea-vote', args=[self.idea.id])
        response = self.client.post(url)
        self.assertEqual(response.data['vote_count'], 1)
        self.assertEqual(response.data['votes'], [self.author.id])
        response = self.client.post(url)
        self.assertEqual(response.data['vote_count'], 0)

    def test_comment_requires_text(self):
        url = reverse('idea-comment', args=[self.idea.id])
        response = self.client.post(url, {'comment': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'comment': 'Count me in'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['comments'][0]['comment'], 'Count me in')
        self.assertEqual(response.data['comments'][0]['author']['name'], 'Author')

    def test_comment_on_missing_idea(self):
        response = self.client.post(reverse('idea-comment', args=[999999]), {'comment': 'hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_other_user_cannot_delete(self):
        self.client.force_authenticate(user=self.other)
        response = self.client.delete(reverse('idea-detail', args=[self.idea.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Idea.objects.filter(id=self.idea.id).exists())

    def test_leader_deletes_and_audit_is_written(self):
        self.client.force_authenticate(user=self.leader)
        response = self.client.delete(reverse('idea-detail', args=[self.idea.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Idea.objects.filter(id=self.idea.id).exists())
        self.assertTrue(AuditLogEntry.objects.filter(entity_type='idea', entity_title='Hack day').exists())

    def test_owner_deletes(self):
        response = self.client.delete(reverse('idea-detail', args=[self.idea.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
