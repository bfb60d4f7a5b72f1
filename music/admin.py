from django.contrib import admin

from .models import Music


@admin.register(Music)
class MusicAdmin(admin.ModelAdmin):
    list_display = ('title', 'added_by', 'is_active', 'created_at')
    list_filter = ('is_active',)
