from django.contrib import admin

from .models import Resource


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ('title', 'type', 'uploaded_by', 'views', 'created_at')
    list_filter = ('type',)
    search_fields = ('title', 'description')
