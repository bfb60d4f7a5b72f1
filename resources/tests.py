from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from activity.models import AuditLogEntry
from .models import Resource

User = get_user_model()


class ResourceViewsTest(APITestCase):
    def setUp(self):
        self.leader = User.objects.create_user(
            email='lead@example.com', password='testpass123', name='Lead', role=Role.TEAM_LEADER
        )
        self.other_leader = User.objects.create_user(
            email='lead2@example.com', password='testpass123', name='Lead Two', role=Role.TEAM_LEADER
        )
        self.member = User.objects.create_user(email='member@example.com', password='testpass123', name='Member')
        self.client.force_authenticate(user=self.leader)
        self.video = Resource.objects.create(
            title='Django tips', description='Conference talk', type='video',
            url='https://example.com/talk', tags=['django', 'python'], uploaded_by=self.leader
        )
        self.tool = Resource.objects.create(
            title='Profiler', description='Finds slow code', type='tool',
            url='https://example.com/profiler', tags=['performance'], uploaded_by=self.other_leader
        )

    @mock.patch('resources.views.publish')
    def test_leader_shares_resource(self, publish):
        data = {
            'title': 'Style guide', 'description': 'House style', 'type': 'article',
            'url': 'https://example.com/style', 'tags': ['writing']
        }
        response = self.client.post(reverse('resource-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['uploaded_by']['id'], self.leader.id)
        self.assertEqual(response.data['views'], 0)
        self.assertEqual(publish.call_args[0][:2], ('resources', 'newResource'))

    def test_member_cannot_share(self):
        self.client.force_authenticate(user=self.member)
        data = {'title': 'x', 'description': 'x', 'type': 'tool', 'url': 'https://example.com'}
        response = self.client.post(reverse('resource-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_type_rejected(self):
        data = {'title': 'x', 'description': 'x', 'type': 'podcast', 'url': 'https://example.com'}
        response = self.client.post(reverse('resource-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_type_and_search(self):
        response = self.client.get(reverse('resource-list-create') + '?type=tool')
        self.assertEqual([r['title'] for r in response.data], ['Profiler'])

        response = self.client.get(reverse('resource-list-create') + '?search=conference')
        self.assertEqual([r['title'] for r in response.data], ['Django tips'])

    def test_default_order_newest_first(self):
        response = self.client.get(reverse('resource-list-create'))
        self.assertEqual(response.data[0]['title'], 'Profiler')

    def test_update_by_owner(self):
        url = reverse('resource-detail', args=[self.video.id])
        response = self.client.patch(url, {'title': 'Django tricks', 'views': 99}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.video.refresh_from_db()
        self.assertEqual(self.video.title, 'Django tricks')
        self.assertEqual(self.video.views, 0)

    def test_member_cannot_update_others(self):
        self.client.force_authenticate(user=self.member)
        url = reverse('resource-detail', args=[self.video.id])
        response = self.client.patch(url, {'title': 'Mine now'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_writes_audit(self):
        response = self.client.delete(reverse('resource-detail', args=[self.tool.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Resource.objects.filter(id=self.tool.id).exists())
        self.assertTrue(AuditLogEntry.objects.filter(entity_type='resource', entity_title='Profiler').exists())

    def test_like_toggle(self):
        self.client.force_authenticate(user=self.member)
        url = reverse('resource-like', args=[self.video.id])
        response = self.client.post(url)
        self.assertEqual(response.data['likes'], [self.member.id])
        response = self.client.post(url)
        self.assertEqual(response.data['likes'], [])

    def test_view_counter(self):
        url = reverse('resource-view', args=[self.video.id])
        self.client.post(url)
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'views': 2})

        response = self.client.post(reverse('resource-view', args=[999999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_tag_filter_matches_whole_tags(self):
        Resource.objects.create(
            title='Cafe guide', description='x', type='article', url='https://example.com/cafe',
            tags=['café', 'say "hi"'], uploaded_by=self.leader
        )
        url = reverse('resource-list-create')
        self.assertEqual([r['title'] for r in self.client.get(url, {'tags': 'py'}).data], [])
        self.assertEqual([r['title'] for r in self.client.get(url, {'tags': 'python'}).data], ['Django tips'])
        self.assertEqual([r['title'] for r in self.client.get(url, {'tags': 'café'}).data], ['Cafe guide'])
        self.assertEqual([r['title'] for r in self.client.get(url, {'tags': 'say "hi"'}).data], ['Cafe guide'])
        self.assertEqual(
            sorted(r['title'] for r in self.client.get(url, {'tags': 'performance,django'}).data),
            ['Django tips', 'Profiler']
        )

    def test_tags_are_normalised_on_write(self):
        data = {
            'title': 'Guide', 'description': 'x', 'type': 'article',
            'url': 'https://example.com/guide', 'tags': ['Django', 'django', 'CSS']
        }
        response = self.client.post(reverse('resource-list-create'), data, format='json')
        self.assertEqual(response.data['tags'], ['django', 'css'])
        response = self.client.get(reverse('resource-list-create') + '?tags=CSS')
        self.assertEqual([r['title'] for r in response.data], ['Guide'])
