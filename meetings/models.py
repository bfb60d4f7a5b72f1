# teamhub/meetings/models.py
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Meeting(models.Model):
    RECURRING_PATTERN_CHOICES = [
        ('daily', 'Daily'),
        ('weekly', 'Weekly'),
        ('monthly', 'Monthly'),
    ]

    title = models.CharField(max_length=255)
    agenda = models.TextField()
    date = models.DateTimeField()
    duration = models.PositiveSmallIntegerField(
        help_text='Duration in minutes',
        validators=[MinValueValidator(15), MaxValueValidator(240)]
    )
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='organized_meetings')
    meeting_link = models.URLField(max_length=500, blank=True)
    recurring = models.BooleanField(default=False)
    recurring_pattern = models.CharField(max_length=10, choices=RECURRING_PATTERN_CHOICES, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['date']

    def __str__(self):
        return f"{self.title} ({self.date:%Y-%m-%d %H:%M})"


class MeetingParticipant(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('declined', 'Declined'),
    ]

    meeting = models.ForeignKey(Meeting, on_delete=models.CASCADE, related_name='participants')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='meeting_invitations')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending')

    class Meta:
        unique_together = [('meeting', 'user')]
        ordering = ['id']

    def __str__(self):
        return f"{self.user.email} -> {self.meeting.title}: {self.status}"
