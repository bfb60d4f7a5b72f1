# teamhub/activity/models.py
from django.conf import settings
from django.db import models

from teamhub.exceptions import ConflictError


class AuditLogQuerySet(models.QuerySet):
    def delete(self):
        raise ConflictError("Audit log entries cannot be deleted.")


class AuditLogEntry(models.Model):
    """Append-only record of destructive and administrative actions."""
    ACTION_CHOICES = [
        ('create', 'Created'),
        ('delete', 'Deleted'),
        ('role_change', 'Role Changed'),
    ]

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries'
    )
    # kept so the entry stays readable after the actor is deleted
    actor_name = models.CharField(max_length=150, blank=True)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    entity_type = models.CharField(max_length=50)
    entity_id = models.PositiveBigIntegerField(null=True, blank=True)
    entity_title = models.CharField(max_length=255, blank=True)
    details = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        ordering = ['-timestamp', '-id']
        verbose_name_plural = 'Audit Log'
        indexes = [
            models.Index(fields=['entity_type', '-timestamp'], name='audit_entity_ts_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ConflictError("Audit log entries cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ConflictError("Audit log entries cannot be deleted.")

    def __str__(self):
        return f"{self.actor_name or '[system]'} {self.action} {self.entity_type} '{self.entity_title}' at {self.timestamp}"
