# teamhub/resources/models.py
from django.conf import settings
from django.db import models


class Resource(models.Model):
    TYPE_CHOICES = [
        ('video', 'Video'),
        ('article', 'Article'),
        ('tool', 'Tool'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField()
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    url = models.URLField(max_length=500)
    tags = models.JSONField(default=list, blank=True)
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='resources')
    likes = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='liked_resources')
    views = models.PositiveIntegerField(default=0, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.title} ({self.get_type_display()})"
