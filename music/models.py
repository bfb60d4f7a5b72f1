# teamhub/music/models.py
from django.conf import settings
from django.db import models


class Music(models.Model):
    title = models.CharField(max_length=255)
    embed_code = models.TextField()
    added_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='added_music')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'music'

    def __str__(self):
        return self.title
