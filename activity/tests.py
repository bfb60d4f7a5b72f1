from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from teamhub.exceptions import ConflictError
from . import services
from .models import AuditLogEntry

User = get_user_model()


class AuditLogEntryTest(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@example.com', password='testpass123', name='Admin', role=Role.ADMIN
        )

    def test_record_snapshots_actor_name(self):
        entry = services.record(self.admin, 'delete', 'task', 7, 'Write docs')
        self.assertEqual(entry.actor_name, 'Admin')
        self.assertEqual(entry.details, {})

    def test_entries_are_append_only(self):
        entry = services.record(self.admin, 'delete', 'task', 7, 'Write docs')
        entry.entity_title = 'Rewritten'
        with self.assertRaises(ConflictError):
            entry.save()
        with self.assertRaises(ConflictError):
            entry.delete()
        with self.assertRaises(ConflictError):
            AuditLogEntry.objects.all().delete()
        self.assertEqual(AuditLogEntry.objects.get().entity_title, 'Write docs')

    def test_entry_survives_actor_deletion(self):
        services.record(self.admin, 'delete', 'idea', 3, 'Hack day')
        self.admin.delete()
        entry = AuditLogEntry.objects.get()
        self.assertIsNone(entry.actor)
        self.assertEqual(entry.actor_name, 'Admin')


class AuditLogListViewTest(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@example.com', password='testpass123', name='Admin', role=Role.ADMIN
        )
        self.leader = User.objects.create_user(
            email='lead@example.com', password='testpass123', name='Lead', role=Role.TEAM_LEADER
        )
        services.record(self.admin, 'delete', 'task', 1, 'Old task')
        services.record(self.admin, 'role_change', 'user', self.leader.id, self.leader.email,
                        details={'from': 'user', 'to': 'team-leader'})

    def test_admin_lists_newest_first(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('audit-log-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e['action'] for e in response.data], ['role_change', 'delete'])

    def test_filter_by_entity_type(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('audit-log-list') + '?entity_type=task')
        self.assertEqual([e['entity_title'] for e in response.data], ['Old task'])

    def test_leader_cannot_read_audit_log(self):
        self.client.force_authenticate(user=self.leader)
        response = self.client.get(reverse('audit-log-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
