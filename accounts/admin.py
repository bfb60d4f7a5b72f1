from django.contrib import admin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'is_verified', 'date_joined')
    list_filter = ('role', 'is_verified')
    search_fields = ('email', 'name')
    ordering = ('name',)
