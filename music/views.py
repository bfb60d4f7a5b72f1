# teamhub/music/views.py
import logging

from rest_framework import generics, permissions, status
from rest_framework.response import Response

from accounts.permissions import Capability, require_capability
from realtime.publisher import MUSIC, publish
from .models import Music
from .serializers import MusicSerializer

logger = logging.getLogger(__name__)


class MusicListCreateView(generics.ListCreateAPIView):
    """Active tracks for everyone; adding one needs the music capability."""
    serializer_class = MusicSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Music.objects.filter(is_active=True).select_related('added_by')

    def perform_create(self, serializer):
        require_capability(self.request.user, Capability.MANAGE_MUSIC)
        music = serializer.save(added_by=self.request.user)
        logger.info(f"Music {music.id} '{music.title}' added by {self.request.user.email}")
        publish(MUSIC, 'newMusic', serializer.data)


class MusicDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = MusicSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Music.objects.select_related('added_by')

    def perform_update(self, serializer):
        require_capability(self.request.user, Capability.MANAGE_MUSIC)
        serializer.save()
        publish(MUSIC, 'musicUpdated', serializer.data)

    def perform_destroy(self, instance):
        require_capability(self.request.user, Capability.MANAGE_MUSIC)
        music_id = instance.id
        instance.delete()
        publish(MUSIC, 'musicDeleted', {'id': music_id})

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Music deleted successfully'}, status=status.HTTP_200_OK)
