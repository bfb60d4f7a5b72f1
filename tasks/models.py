# teamhub/tasks/models.py
from django.conf import settings
from django.db import models

DEFAULT_STAGE_DESCRIPTIONS = {
    'Planning': 'Initial planning and requirement gathering phase',
    'Development': 'Active development and implementation phase',
    'Review': 'Code review and initial testing phase',
    'Testing': 'Comprehensive testing and bug fixing phase',
    'Deployment': 'Final deployment and release phase',
}


def default_stages():
    return list(settings.TASK_DEFAULT_STAGES)


def default_stage_descriptions():
    return {name: DEFAULT_STAGE_DESCRIPTIONS[name] for name in default_stages() if name in DEFAULT_STAGE_DESCRIPTIONS}


class Task(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in-progress', 'In Progress'),
        ('completed', 'Completed'),
    ]

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField()
    deadline = models.DateTimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    category = models.CharField(max_length=100, blank=True)
    tags = models.JSONField(default=list, blank=True)
    assignees = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='assigned_tasks')

    # ordered stage names; current_stage is always one of them
    stages = models.JSONField(default=default_stages)
    current_stage = models.CharField(max_length=100, blank=True)
    stage_descriptions = models.JSONField(default=default_stage_descriptions, blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='created_tasks')
    team_leader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='led_tasks'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        editable=False,
        related_name='modified_tasks'
    )
    version = models.PositiveIntegerField(default=1, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['deadline']

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.current_stage and self.stages:
            self.current_stage = self.stages[0]
        super().save(*args, **kwargs)


class Stage(models.Model):
    """Per-stage content and completion flag. Only the stage tracker flips is_completed."""
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='stage_records')
    stage_name = models.CharField(max_length=100)
    content = models.TextField(blank=True, default='')
    is_completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['stage_name']
        unique_together = [('task', 'stage_name')]

    def __str__(self):
        return f"{self.task.title}: {self.stage_name}"


class StatusChange(models.Model):
    CREATED = 'created'

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='status_history')
    status = models.CharField(max_length=20)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='status_changes'
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['timestamp', 'id']

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Status history entries are append-only.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.task.title} -> {self.status}"
