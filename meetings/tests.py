from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Meeting, MeetingParticipant

User = get_user_model()


class MeetingViewsTest(APITestCase):
    def setUp(self):
        self.organizer = User.objects.create_user(email='org@example.com', password='testpass123', name='Organizer')
        self.guest = User.objects.create_user(email='guest@example.com', password='testpass123', name='Guest')
        self.outsider = User.objects.create_user(email='out@example.com', password='testpass123', name='Outsider')
        self.client.force_authenticate(user=self.organizer)
        self.meeting = Meeting.objects.create(
            title='Sprint review', agenda='Demo', date=timezone.now() + timezone.timedelta(days=1),
            duration=60, created_by=self.organizer
        )
        MeetingParticipant.objects.create(meeting=self.meeting, user=self.guest)

    def payload(self, **overrides):
        data = {
            'title': 'Planning',
            'agenda': 'Next sprint',
            'date': (timezone.now() + timezone.timedelta(days=2)).isoformat(),
            'duration': 45,
            'participant_ids': [self.guest.id],
        }
        data.update(overrides)
        return data

    @mock.patch('meetings.views.publish_to_users')
    def test_create_notifies_participants(self, publish_to_users):
        response = self.client.post(reverse('meeting-list-create'), self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['participants'][0]['status'], 'pending')
        recipients, event, _ = publish_to_users.call_args[0]
        self.assertEqual((recipients, event), ([self.guest.id], 'newMeeting'))

    def test_duration_bounds(self):
        response = self.client.post(reverse('meeting-list-create'), self.payload(duration=10), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(reverse('meeting-list-create'), self.payload(duration=300), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_recurring_needs_pattern(self):
        response = self.client.post(reverse('meeting-list-create'), self.payload(recurring=True), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(
            reverse('meeting-list-create'), self.payload(recurring=True, recurring_pattern='weekly'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_list_shows_organized_and_invited(self):
        response = self.client.get(reverse('meeting-list-create'))
        self.assertEqual(len(response.data), 1)
        self.client.force_authenticate(user=self.guest)
        response = self.client.get(reverse('meeting-list-create'))
        self.assertEqual(len(response.data), 1)
        self.client.force_authenticate(user=self.outsider)
        response = self.client.get(reverse('meeting-list-create'))
        self.assertEqual(len(response.data), 0)

    def test_only_organizer_updates(self):
        url = reverse('meeting-detail', args=[self.meeting.id])
        self.client.force_authenticate(user=self.guest)
        response = self.client.patch(url, {'title': 'Hijacked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.organizer)
        response = self.client.patch(url, {'title': 'Sprint demo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Sprint demo')

    def test_replacing_participants_keeps_answers(self):
        MeetingParticipant.objects.filter(meeting=self.meeting, user=self.guest).update(status='accepted')
        url = reverse('meeting-detail', args=[self.meeting.id])
        response = self.client.patch(url, {'participant_ids': [self.guest.id, self.outsider.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        answers = {p['user']['id']: p['status'] for p in response.data['participants']}
        self.assertEqual(answers, {self.guest.id: 'accepted', self.outsider.id: 'pending'})

    @mock.patch('meetings.views.publish_to_users')
    def test_cancel(self, publish_to_users):
        response = self.client.delete(reverse('meeting-detail', args=[self.meeting.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Meeting cancelled successfully')
        self.assertFalse(Meeting.objects.exists())
        self.assertEqual(publish_to_users.call_args[0][1], 'meetingCancelled')

    @mock.patch('meetings.views.publish')
    @mock.patch('meetings.views.publish_to_users')
    def test_participant_responds(self, publish_to_users, publish):
        self.client.force_authenticate(user=self.guest)
        url = reverse('meeting-respond', args=[self.meeting.id])
        response = self.client.post(url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(MeetingParticipant.objects.get(user=self.guest).status, 'accepted')

        payload = {'meetingId': self.meeting.id, 'userId': self.guest.id, 'status': 'accepted'}
        publish_to_users.assert_called_once_with([self.organizer.id], 'meetingResponseUpdated', payload)
        publish.assert_called_once_with(f'meeting_{self.meeting.id}', 'meetingResponseUpdated', payload)

    def test_non_participant_cannot_respond(self):
        self.client.force_authenticate(user=self.outsider)
        url = reverse('meeting-respond', args=[self.meeting.id])
        response = self.client.post(url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_response_status(self):
        self.client.force_authenticate(user=self.guest)
        url = reverse('meeting-respond', args=[self.meeting.id])
        response = self.client.post(url, {'status': 'maybe'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
