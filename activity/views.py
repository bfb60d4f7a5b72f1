# teamhub/activity/views.py
from rest_framework import generics, permissions

from accounts.permissions import Capability, capability_required
from .models import AuditLogEntry
from .serializers import AuditLogEntrySerializer


class AuditLogListView(generics.ListAPIView):
    serializer_class = AuditLogEntrySerializer
    permission_classes = [permissions.IsAuthenticated, capability_required(Capability.VIEW_AUDIT_LOG)]
    filterset_fields = ['action', 'entity_type', 'actor']

    def get_queryset(self):
        return AuditLogEntry.objects.select_related('actor').order_by('-timestamp', '-id')
