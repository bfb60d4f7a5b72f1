# teamhub/chat/models.py
from django.conf import settings
from django.db import models


class Chat(models.Model):
    TYPE_CHOICES = [
        ('direct', 'Direct'),
        ('group', 'Group'),
    ]

    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='direct')
    name = models.CharField(max_length=100, blank=True)
    participants = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name='chats')
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='administered_chats'
    )
    # "<low id>:<high id>" for direct chats, so each pair has at most one chat
    direct_key = models.CharField(max_length=50, unique=True, null=True, blank=True, editable=False)
    last_message_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at', '-id']

    def __str__(self):
        return self.name or f"Direct chat {self.direct_key}"

    @property
    def is_group(self):
        return self.type == 'group'


class Message(models.Model):
    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    content = models.TextField()
    read_by = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='read_messages')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Messages cannot be edited.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.sender.email}: {self.content[:30]}"
