from django.contrib import admin

from .models import Idea, IdeaComment

admin.site.register(Idea)
admin.site.register(IdeaComment)
