# teamhub/ideas/models.py
from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

http_url_validator = RegexValidator(
    regex=r'^(http|https)://[^ "]+$',
    message='Please enter a valid URL'
)


class Idea(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField()
    resource_link = models.CharField(max_length=500, blank=True, validators=[http_url_validator])
    votes = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='voted_ideas')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='ideas')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.title


class IdeaComment(models.Model):
    idea = models.ForeignKey(Idea, on_delete=models.CASCADE, related_name='comments')
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    comment = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Comments cannot be edited.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Comment by {self.author.email} on {self.idea.title}"
