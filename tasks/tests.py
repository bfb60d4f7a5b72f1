from datetime import timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from activity.models import AuditLogEntry
from . import services
from .exceptions import InvalidStageError, StageConflictError, TaskNotFoundError
from .models import Task, Stage, StatusChange
from .serializers import TaskSerializer
from .stages import StageMove, plan_stage_move

User = get_user_model()

STAGES = ['Planning', 'Development', 'Review', 'Testing', 'Deployment']


class PlanStageMoveTest(SimpleTestCase):
    def test_forward_completes_earlier_stages_only(self):
        move = plan_stage_move(STAGES, 'Planning', 'Testing')
        self.assertEqual(move.target, 'Testing')
        self.assertEqual(move.complete, ('Planning', 'Development', 'Review'))
        self.assertEqual(move.reopen, ())

    def test_backward_reopens_later_stages_only(self):
        move = plan_stage_move(STAGES, 'Testing', 'Development')
        self.assertEqual(move.complete, ())
        self.assertEqual(move.reopen, ('Review', 'Testing', 'Deployment'))

    def test_same_stage_with_last_flag_completes_target(self):
        move = plan_stage_move(STAGES, 'Deployment', 'Deployment', is_last_stage=True)
        self.assertEqual(move.complete, ('Deployment',))
        self.assertEqual(move.reopen, ())

    def test_same_stage_with_first_flag_reopens_target(self):
        move = plan_stage_move(STAGES, 'Planning', 'Planning', is_first_stage=True)
        self.assertEqual(move.reopen, ('Planning',))
        self.assertEqual(move.complete, ())

    def test_last_flag_wins_over_first_flag(self):
        move = plan_stage_move(['Only'], 'Only', 'Only', is_last_stage=True, is_first_stage=True)
        self.assertEqual(move.complete, ('Only',))

    def test_same_stage_without_flags_changes_nothing(self):
        move = plan_stage_move(STAGES, 'Review', 'Review')
        self.assertEqual(move, StageMove('Review'))

    def test_flags_ignored_when_stage_changes(self):
        move = plan_stage_move(STAGES, 'Planning', 'Review', is_first_stage=True)
        self.assertEqual(move.complete, ('Planning', 'Development'))
        self.assertEqual(move.reopen, ())

    def test_unknown_target_is_rejected(self):
        with self.assertRaises(InvalidStageError):
            plan_stage_move(STAGES, 'Planning', 'Shipping')

    def test_unknown_current_stage_counts_as_before_first(self):
        move = plan_stage_move(STAGES, 'Gone', 'Review')
        self.assertEqual(move.complete, ('Planning', 'Development'))

    def test_forward_move_is_idempotent(self):
        first = plan_stage_move(STAGES, 'Planning', 'Review')
        self.assertEqual(first.complete, ('Planning', 'Development'))
        # once the pointer sits on the target, repeating the move changes nothing
        self.assertEqual(plan_stage_move(STAGES, first.target, 'Review'), StageMove('Review'))


class TaskModelTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='lead@example.com', password='testpass123', name='Lead')

    def test_task_default_values(self):
        task = Task.objects.create(
            title='Launch',
            description='Ship it',
            deadline=timezone.now() + timedelta(days=3),
            created_by=self.user
        )
        self.assertEqual(task.status, 'pending')
        self.assertEqual(task.priority, 'medium')
        self.assertEqual(task.stages, STAGES)
        self.assertEqual(task.current_stage, 'Planning')
        self.assertEqual(task.version, 1)
        self.assertIn('Planning', task.stage_descriptions)

    def test_status_history_is_append_only(self):
        task = Task.objects.create(
            title='Launch', description='Ship it',
            deadline=timezone.now(), created_by=self.user
        )
        change = StatusChange.objects.create(task=task, status='created', actor=self.user)
        change.status = 'completed'
        with self.assertRaises(ValueError):
            change.save()


class StageTrackerServiceTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email='lead@example.com', password='testpass123', name='Lead', role=Role.TEAM_LEADER
        )
        self.task = Task.objects.create(
            title='Launch', description='Ship it',
            deadline=timezone.now() + timedelta(days=3), created_by=self.user
        )
        services.ensure_stage_records(self.task)

    def flags(self):
        return dict(self.task.stage_records.values_list('stage_name', 'is_completed'))

    def test_planning_to_testing(self):
        task = services.move_to_stage(self.task.id, 'Testing', self.user)
        self.assertEqual(task.current_stage, 'Testing')
        self.assertEqual(self.flags(), {
            'Planning': True, 'Development': True, 'Review': True,
            'Testing': False, 'Deployment': False,
        })

    def test_testing_back_to_development(self):
        services.move_to_stage(self.task.id, 'Deployment', self.user)
        services.move_to_stage(self.task.id, 'Deployment', self.user, is_last_stage=True)
        task = services.move_to_stage(self.task.id, 'Development', self.user)
        self.assertEqual(task.current_stage, 'Development')
        self.assertEqual(self.flags(), {
            'Planning': True, 'Development': True, 'Review': False,
            'Testing': False, 'Deployment': False,
        })

    def test_deployment_marked_last(self):
        services.move_to_stage(self.task.id, 'Deployment', self.user)
        services.move_to_stage(self.task.id, 'Deployment', self.user, is_last_stage=True)
        self.assertTrue(all(self.flags().values()))

    def test_unknown_stage_mutates_nothing(self):
        services.move_to_stage(self.task.id, 'Review', self.user)
        before = self.flags()
        with self.assertRaises(InvalidStageError):
            services.move_to_stage(self.task.id, 'Shipping', self.user)
        self.task.refresh_from_db()
        self.assertEqual(self.task.current_stage, 'Review')
        self.assertEqual(self.flags(), before)

    def test_unknown_task(self):
        with self.assertRaises(TaskNotFoundError):
            services.move_to_stage(999999, 'Review', self.user)

    def test_version_increments_and_stale_version_conflicts(self):
        task = services.move_to_stage(self.task.id, 'Review', self.user, expected_version=1)
        self.assertEqual(task.version, 2)
        with self.assertRaises(StageConflictError):
            services.move_to_stage(self.task.id, 'Testing', self.user, expected_version=1)
        self.task.refresh_from_db()
        self.assertEqual(self.task.current_stage, 'Review')

    def test_missing_stage_records_are_created(self):
        self.task.stage_records.all().delete()
        services.move_to_stage(self.task.id, 'Development', self.user)
        self.assertEqual(Stage.objects.filter(task=self.task).count(), 5)
        self.assertTrue(self.flags()['Planning'])

    def test_update_from_stale_instance_keeps_stage_move(self):
        stale = Task.objects.get(pk=self.task.pk)
        services.move_to_stage(self.task.id, 'Testing', self.user)

        serializer = TaskSerializer(stale, data={'description': 'edited'}, partial=True)
        serializer.is_valid(raise_exception=True)
        task = services.update_task(serializer, self.user)

        task.refresh_from_db()
        self.assertEqual(task.current_stage, 'Testing')
        self.assertEqual(task.description, 'edited')
        self.assertEqual(task.version, 3)
        self.assertTrue(self.flags()['Review'])

    def test_update_with_stale_version_conflicts(self):
        services.move_to_stage(self.task.id, 'Review', self.user)
        serializer = TaskSerializer(self.task, data={'title': 'Renamed', 'expected_version': 1}, partial=True)
        serializer.is_valid(raise_exception=True)
        with self.assertRaises(StageConflictError):
            services.update_task(serializer, self.user)
        self.task.refresh_from_db()
        self.assertEqual(self.task.title, 'Launch')
        self.assertEqual(self.task.version, 2)

    def test_assignees_are_notified(self):
        member = User.objects.create_user(email='member@example.com', password='testpass123', name='Member')
        self.task.assignees.add(member)
        with mock.patch('tasks.services.publish_to_users') as publish:
            services.move_to_stage(self.task.id, 'Review', self.user)
        publish.assert_called_once()
        recipients, event, payload = publish.call_args[0]
        self.assertEqual(recipients, [member.id])
        self.assertEqual(event, 'taskUpdated')
        self.assertEqual(payload['current_stage'], 'Review')


class TaskViewsTest(APITestCase):
    def setUp(self):
        self.leader = User.objects.create_user(
            email='lead@example.com', password='testpass123', name='Lead', role=Role.TEAM_LEADER
        )
        self.member = User.objects.create_user(email='member@example.com', password='testpass123', name='Member')
        self.outsider = User.objects.create_user(email='other@example.com', password='testpass123', name='Other')
        self.client.force_authenticate(user=self.leader)
        self.deadline = (timezone.now() + timedelta(days=5)).isoformat()

    def create_task(self, **extra):
        data = {
            'title': 'Release',
            'description': 'Cut the release',
            'deadline': self.deadline,
            'assignees': [self.member.id],
        }
        data.update(extra)
        return self.client.post(reverse('task-list-create'), data, format='json')

    def test_leader_creates_task_with_stages_and_history(self):
        response = self.create_task()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        task = Task.objects.get(id=response.data['id'])
        self.assertEqual(task.created_by, self.leader)
        self.assertEqual(task.current_stage, 'Planning')
        self.assertEqual(task.stage_records.count(), 5)
        self.assertEqual(list(task.status_history.values_list('status', flat=True)), ['created'])

    def test_custom_stages(self):
        response = self.create_task(stages=['Draft', 'Publish'], current_stage='Publish')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['current_stage'], 'Publish')

    def test_duplicate_or_empty_stages_rejected(self):
        response = self.create_task(stages=['Draft', 'Draft'])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.create_task(stages=[])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_regular_user_cannot_create(self):
        self.client.force_authenticate(user=self.member)
        response = self.create_task()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'forbidden')

    def test_list_shows_only_related_tasks(self):
        self.create_task()
        self.client.force_authenticate(user=self.member)
        response = self.client.get(reverse('task-list-create'))
        self.assertEqual(len(response.data), 1)
        self.client.force_authenticate(user=self.outsider)
        response = self.client.get(reverse('task-list-create'))
        self.assertEqual(len(response.data), 0)

    def test_status_filter(self):
        self.create_task()
        self.create_task(title='Done', status='completed')
        response = self.client.get(reverse('task-list-create') + '?status=completed')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status'], 'completed')

    def test_assignee_updates_status_and_history_grows(self):
        task_id = self.create_task().data['id']
        self.client.force_authenticate(user=self.member)
        url = reverse('task-detail', args=[task_id])
        response = self.client.patch(url, {'status': 'in-progress'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.patch(url, {'title': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        history = list(StatusChange.objects.filter(task_id=task_id).values_list('status', flat=True))
        self.assertEqual(history, ['created', 'in-progress'])

    def test_update_cannot_touch_stages(self):
        task_id = self.create_task().data['id']
        url = reverse('task-detail', args=[task_id])
        response = self.client.patch(url, {'current_stage': 'Review', 'stages': ['X']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        task = Task.objects.get(id=task_id)
        self.assertEqual(task.current_stage, 'Planning')
        self.assertEqual(task.stages, STAGES)

    def test_delete_writes_audit_entry(self):
        task_id = self.create_task().data['id']
        response = self.client.delete(reverse('task-detail', args=[task_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Task.objects.filter(id=task_id).exists())
        self.assertFalse(Stage.objects.filter(task_id=task_id).exists())
        entry = AuditLogEntry.objects.get(entity_type='task')
        self.assertEqual(entry.action, 'delete')
        self.assertEqual(entry.entity_title, 'Release')
        self.assertEqual(entry.actor, self.leader)

    def test_move_stage_endpoint(self):
        task_id = self.create_task().data['id']
        url = reverse('task-stage', args=[task_id])
        response = self.client.put(url, {'stage': 'Testing'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['current_stage'], 'Testing')

        response = self.client.get(reverse('task-stages', args=[task_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # sorted by name
        self.assertEqual(
            [(s['stageName'], s['isCompleted']) for s in response.data],
            [('Deployment', False), ('Development', True), ('Planning', True),
             ('Review', True), ('Testing', False)]
        )

    def test_move_stage_errors(self):
        task_id = self.create_task().data['id']
        response = self.client.put(reverse('task-stage', args=[task_id]), {'stage': 'Nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid')

        response = self.client.put(reverse('task-stage', args=[999999]), {'stage': 'Review'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.put(
            reverse('task-stage', args=[task_id]), {'stage': 'Review', 'expectedVersion': 7}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'conflict')

    def test_outsider_cannot_move_stage(self):
        task_id = self.create_task().data['id']
        self.client.force_authenticate(user=self.outsider)
        response = self.client.put(reverse('task-stage', args=[task_id]), {'stage': 'Review'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_outsider_cannot_list_stages(self):
        task_id = self.create_task().data['id']
        self.client.force_authenticate(user=self.outsider)
        response = self.client.get(reverse('task-stages', args=[task_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_stage_content_round_trip(self):
        task_id = self.create_task().data['id']
        self.client.force_authenticate(user=self.member)
        response = self.client.post(reverse('stage-content-save'), {
            'taskId': task_id, 'stageName': 'Review', 'content': 'Looks good'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['content'], 'Looks good')

        response = self.client.get(reverse('stage-content-detail', args=[task_id, 'Review']))
        self.assertEqual(response.data['content'], 'Looks good')
        self.assertFalse(response.data['is_completed'])

    def test_stage_content_errors(self):
        task_id = self.create_task().data['id']
        response = self.client.post(reverse('stage-content-save'), {
            'taskId': task_id, 'stageName': 'Nope', 'content': 'x'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(reverse('stage-content-save'), {
            'taskId': 999999, 'stageName': 'Review', 'content': 'x'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_stage_content_default_when_record_missing(self):
        task_id = self.create_task().data['id']
        Stage.objects.filter(task_id=task_id, stage_name='Review').delete()
        response = self.client.get(reverse('stage-content-detail', args=[task_id, 'Review']))
        self.assertEqual(response.data, {'content': '', 'is_completed': False})

    def test_status_history_feed_includes_deletions(self):
        first = self.create_task(title='Keep').data['id']
        second = self.create_task(title='Drop').data['id']
        self.client.patch(reverse('task-detail', args=[first]), {'status': 'completed'}, format='json')
        self.client.delete(reverse('task-detail', args=[second]))

        response = self.client.get(reverse('task-status-history'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = [(r['task_title'], r['status']) for r in response.data]
        self.assertIn(('Keep', 'completed'), rows)
        self.assertIn(('Keep', 'created'), rows)
        self.assertIn(('Drop', 'deleted'), rows)
        self.assertEqual(response.data[0]['user_name'], 'Lead')
