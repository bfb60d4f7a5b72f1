from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from activity.models import AuditLogEntry
from .models import Project, TimelineEntry

User = get_user_model()


class ProjectViewsTest(APITestCase):
    def setUp(self):
        self.leader = User.objects.create_user(
            email='lead@example.com', password='testpass123', name='Lead', role=Role.TEAM_LEADER
        )
        self.member = User.objects.create_user(email='member@example.com', password='testpass123', name='Member')
        self.client.force_authenticate(user=self.leader)
        self.project = Project.objects.create(
            title='Website relaunch', image_url='https://example.com/site.png', created_by=self.leader
        )
        self.entry = TimelineEntry.objects.create(
            project=self.project, date='2024-01-10', title='Kickoff', description='First meeting'
        )

    def test_create_with_initial_timeline(self):
        data = {
            'title': 'Mobile app',
            'image_url': 'https://example.com/app.png',
            'timeline_entries': [
                {'date': '2024-02-01', 'title': 'Design', 'description': 'Mockups'},
                {'date': '2024-03-01', 'title': 'Beta', 'description': 'TestFlight'},
            ]
        }
        response = self.client.post(reverse('project-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([e['title'] for e in response.data['timeline_entries']], ['Design', 'Beta'])
        self.assertEqual(response.data['created_by']['id'], self.leader.id)

    def test_title_and_image_required(self):
        response = self.client.post(reverse('project-list-create'), {'title': 'No image'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_member_can_read_but_not_write(self):
        self.client.force_authenticate(user=self.member)
        response = self.client.get(reverse('project-list-create'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        data = {'title': 'x', 'image_url': 'https://example.com/x.png'}
        response = self.client.post(reverse('project-list-create'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_title(self):
        url = reverse('project-detail', args=[self.project.id])
        response = self.client.patch(url, {'title': 'Website 2.0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Website 2.0')
        self.assertEqual(len(response.data['timeline_entries']), 1)

    def test_delete_project(self):
        response = self.client.delete(reverse('project-detail', args=[self.project.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(TimelineEntry.objects.exists())
        self.assertTrue(AuditLogEntry.objects.filter(entity_type='project').exists())

    def test_timeline_entry_lifecycle(self):
        response = self.client.post(
            reverse('timeline-entry-create', args=[self.project.id]),
            {'date': '2024-04-01', 'title': 'Launch', 'description': 'Live'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([e['title'] for e in response.data['timeline_entries']], ['Kickoff', 'Launch'])

        url = reverse('timeline-entry-detail', args=[self.project.id, self.entry.id])
        response = self.client.patch(url, {'title': 'Kickoff call'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['timeline_entries'][0]['title'], 'Kickoff call')

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e['title'] for e in response.data['timeline_entries']], ['Launch'])

    def test_timeline_entry_of_other_project_is_not_found(self):
        other = Project.objects.create(title='Other', image_url='https://example.com/o.png', created_by=self.leader)
        url = reverse('timeline-entry-detail', args=[other.id, self.entry.id])
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
