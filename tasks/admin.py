from django.contrib import admin

from .models import Task, Stage, StatusChange


class StageInline(admin.TabularInline):
    model = Stage
    extra = 0
    readonly_fields = ('is_completed',)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'status', 'priority', 'current_stage', 'deadline', 'created_by')
    list_filter = ('status', 'priority')
    search_fields = ('title', 'description')
    inlines = [StageInline]


admin.site.register(StatusChange)
