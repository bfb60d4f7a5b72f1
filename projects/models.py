# teamhub/projects/models.py
from django.db import models
from django.conf import settings


class Project(models.Model):
    """A finished project shown on the Wall of Victory."""
    title = models.CharField(max_length=255)
    image_url = models.URLField(max_length=500)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='projects')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    last_modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        editable=False,
        related_name='modified_projects'
    )

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.title


class TimelineEntry(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='timeline_entries')
    date = models.DateField()
    title = models.CharField(max_length=255)
    description = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # entries keep the order they were added in
        ordering = ['id']
        verbose_name_plural = 'timeline entries'

    def __str__(self):
        return f"{self.project.title}: {self.title} ({self.date})"
