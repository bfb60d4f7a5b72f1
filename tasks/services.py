# teamhub/tasks/services.py
import logging

from django.db import transaction
from django.utils import timezone

from activity import services as audit
from activity.models import AuditLogEntry
from realtime.publisher import publish_to_users
from .exceptions import TaskNotFoundError, InvalidStageError, StageConflictError
from .models import Task, Stage, StatusChange
from .stages import plan_stage_move

logger = logging.getLogger(__name__)


def get_task(task_id, for_update=False):
    queryset = Task.objects.select_for_update() if for_update else Task.objects.all()
    try:
        return queryset.get(pk=task_id)
    except (Task.DoesNotExist, ValueError):
        raise TaskNotFoundError()


def ensure_stage_records(task):
    """Create an empty, uncompleted Stage row for every stage name that lacks one."""
    Stage.objects.bulk_create(
        [Stage(task=task, stage_name=name) for name in task.stages],
        ignore_conflicts=True,
    )


def create_task(serializer, actor):
    with transaction.atomic():
        task = serializer.save(created_by=actor, updated_by=actor)
        ensure_stage_records(task)
        StatusChange.objects.create(task=task, status=StatusChange.CREATED, actor=actor)
    logger.info(f"Task {task.id} '{task.title}' created by {actor.email}")
    return task


def update_task(serializer, actor):
    """
    Apply the validated fields to a freshly locked row.

    The serializer's instance may be stale, so only the submitted fields are
    written; the stage list and pointer are left to move_to_stage.
    """
    data = dict(serializer.validated_data)
    expected_version = data.pop('expected_version', None)
    assignees = data.pop('assignees', None)

    with transaction.atomic():
        task = get_task(serializer.instance.pk, for_update=True)
        if expected_version is not None and expected_version != task.version:
            raise StageConflictError()

        previous_status = task.status
        for attr, value in data.items():
            setattr(task, attr, value)
        task.updated_by = actor
        task.version += 1
        task.save(update_fields=[*data, 'updated_by', 'version', 'updated_at'])
        if assignees is not None:
            task.assignees.set(assignees)

        if task.status != previous_status:
            StatusChange.objects.create(task=task, status=task.status, actor=actor)
            logger.info(f"Task {task.id} status {previous_status} -> {task.status} by {actor.email}")

    serializer.instance = task
    notify_assignees(task)
    return task


def delete_task(task, actor):
    with transaction.atomic():
        audit.record(actor, 'delete', 'task', task.id, task.title)
        task.stage_records.all().delete()
        task.delete()
    logger.info(f"Task '{task.title}' deleted by {actor.email}")


def move_to_stage(task_id, target_stage, actor, *, is_last_stage=False, is_first_stage=False,
                  expected_version=None):
    """
    Point the task at target_stage and flip stage completion flags.

    The task row is locked for the whole read-modify-write and all writes
    happen in one transaction, so a failed move leaves nothing behind.
    Authorization is the caller's job.
    """
    with transaction.atomic():
        task = get_task(task_id, for_update=True)
        move = plan_stage_move(
            task.stages, task.current_stage, target_stage,
            is_last_stage=is_last_stage, is_first_stage=is_first_stage,
        )
        if expected_version is not None and expected_version != task.version:
            raise StageConflictError()

        ensure_stage_records(task)
        now = timezone.now()
        if move.complete:
            task.stage_records.filter(stage_name__in=move.complete).update(is_completed=True, updated_at=now)
        if move.reopen:
            task.stage_records.filter(stage_name__in=move.reopen).update(is_completed=False, updated_at=now)

        previous_stage = task.current_stage
        task.current_stage = move.target
        task.updated_by = actor
        task.version += 1
        task.save(update_fields=['current_stage', 'updated_by', 'version', 'updated_at'])

    logger.info(f"Task {task.id} moved {previous_stage} -> {move.target} by {getattr(actor, 'email', actor)}")
    notify_assignees(task)
    return task


def list_stages(task_id):
    task = get_task(task_id)
    return task.stage_records.order_by('stage_name')


def save_stage_content(task_id, stage_name, content):
    task = get_task(task_id)
    if stage_name not in task.stages:
        raise InvalidStageError('Invalid stage name')
    stage, _ = Stage.objects.update_or_create(
        task=task, stage_name=stage_name, defaults={'content': content or ''}
    )
    return stage


def get_stage_content(task_id, stage_name):
    task = get_task(task_id)
    if stage_name not in task.stages:
        raise InvalidStageError('Invalid stage name')
    return task.stage_records.filter(stage_name=stage_name).first()


def status_history_feed():
    """Every status change across tasks plus task deletions, newest first."""
    entries = [
        {
            'task_title': change.task.title,
            'user_name': change.actor.name if change.actor else 'Unknown User',
            'status': change.status,
            'timestamp': change.timestamp,
        }
        for change in StatusChange.objects.select_related('task', 'actor')
    ]
    entries.extend(
        {
            'task_title': entry.entity_title,
            'user_name': entry.actor_name or 'Unknown User',
            'status': 'deleted',
            'timestamp': entry.timestamp,
        }
        for entry in AuditLogEntry.objects.filter(entity_type='task', action='delete')
    )
    entries.sort(key=lambda e: e['timestamp'], reverse=True)
    return entries


def notify_assignees(task):
    from .serializers import TaskSerializer

    recipients = list(task.assignees.values_list('id', flat=True))
    if recipients:
        publish_to_users(recipients, 'taskUpdated', TaskSerializer(task).data)
