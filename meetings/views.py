# teamhub/meetings/views.py
import logging

from django.db import models
from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema

from realtime.publisher import meeting_topic, publish, publish_to_users
from teamhub.exceptions import AuthorizationError, NotFoundError
from .models import Meeting, MeetingParticipant
from .serializers import MeetingSerializer, MeetingResponseSerializer

logger = logging.getLogger(__name__)


def participant_ids(meeting):
    return list(meeting.participants.values_list('user_id', flat=True))


class MeetingListCreateView(generics.ListCreateAPIView):
    serializer_class = MeetingSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return Meeting.objects.filter(
            models.Q(created_by=user) |
            models.Q(participants__user=user)
        ).distinct().order_by('date').prefetch_related('participants__user')

    def perform_create(self, serializer):
        meeting = serializer.save(created_by=self.request.user)
        logger.info(f"Meeting {meeting.id} '{meeting.title}' scheduled by {self.request.user.email}")
        publish_to_users(participant_ids(meeting), 'newMeeting', serializer.data)


class MeetingDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = MeetingSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return Meeting.objects.filter(
            models.Q(created_by=user) |
            models.Q(participants__user=user)
        ).distinct()

    def check_organizer(self, meeting):
        if meeting.created_by_id != self.request.user.id:
            raise AuthorizationError("Only the organizer can change this meeting")

    def perform_update(self, serializer):
        self.check_organizer(serializer.instance)
        meeting = serializer.save()
        publish_to_users(participant_ids(meeting), 'meetingUpdated', serializer.data)
        publish(meeting_topic(meeting.id), 'meetingUpdated', serializer.data)

    def perform_destroy(self, instance):
        self.check_organizer(instance)
        meeting_id = instance.id
        recipients = participant_ids(instance)
        instance.delete()
        publish_to_users(recipients, 'meetingCancelled', {'id': meeting_id})
        publish(meeting_topic(meeting_id), 'meetingCancelled', {'id': meeting_id})

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Meeting cancelled successfully'}, status=status.HTTP_200_OK)


class MeetingRespondView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Accept or decline a meeting invitation",
        request_body=MeetingResponseSerializer,
        responses={200: MeetingSerializer}
    )
    def post(self, request, pk):
        serializer = MeetingResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        answer = serializer.validated_data['status']

        try:
            participant = MeetingParticipant.objects.select_related('meeting').get(meeting_id=pk, user=request.user)
        except MeetingParticipant.DoesNotExist:
            raise NotFoundError('Meeting not found')

        participant.status = answer
        participant.save(update_fields=['status'])
        meeting = participant.meeting

        payload = {'meetingId': meeting.id, 'userId': request.user.id, 'status': answer}
        publish_to_users([meeting.created_by_id], 'meetingResponseUpdated', payload)
        publish(meeting_topic(meeting.id), 'meetingResponseUpdated', payload)
        return Response(MeetingSerializer(meeting).data, status=status.HTTP_200_OK)
