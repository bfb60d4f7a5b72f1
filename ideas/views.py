# teamhub/ideas/views.py
import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema

from accounts.permissions import can_modify_owned
from activity import services as audit
from realtime.publisher import IDEAS, publish
from teamhub.exceptions import AuthorizationError
from .models import Idea, IdeaComment
from .serializers import IdeaSerializer, IdeaCommentSerializer

logger = logging.getLogger(__name__)


def idea_queryset():
    return Idea.objects.select_related('created_by').prefetch_related('votes', 'comments__author')


class IdeaListCreateView(generics.ListCreateAPIView):
    serializer_class = IdeaSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return idea_queryset()

    def perform_create(self, serializer):
        idea = serializer.save(created_by=self.request.user)
        logger.info(f"Idea {idea.id} '{idea.title}' created by {self.request.user.email}")
        publish(IDEAS, 'newIdea', serializer.data)


class IdeaDetailView(generics.RetrieveDestroyAPIView):
    serializer_class = IdeaSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return idea_queryset()

    def perform_destroy(self, instance):
        if not can_modify_owned(self.request.user, instance.created_by_id):
            raise AuthorizationError("Not authorized to delete this idea")
        idea_id = instance.id
        with transaction.atomic():
            audit.record(self.request.user, 'delete', 'idea', idea_id, instance.title)
            instance.delete()
        publish(IDEAS, 'ideaDeleted', {'id': idea_id})

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Idea deleted successfully'}, status=status.HTTP_200_OK)


class IdeaVoteView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Toggle the current user's vote on an idea",
        request_body=None,
        responses={200: IdeaSerializer}
    )
    def post(self, request, pk):
        idea = get_object_or_404(Idea, pk=pk)
        if idea.votes.filter(pk=request.user.pk).exists():
            idea.votes.remove(request.user)
        else:
            idea.votes.add(request.user)

        data = IdeaSerializer(idea_queryset().get(pk=idea.pk)).data
        publish(IDEAS, 'ideaVoted', data)
        return Response(data, status=status.HTTP_200_OK)


class IdeaCommentView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Comment on an idea",
        request_body=IdeaCommentSerializer,
        responses={200: IdeaSerializer}
    )
    def post(self, request, pk):
        idea = get_object_or_404(Idea, pk=pk)
        serializer = IdeaCommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(idea=idea, author=request.user)

        data = IdeaSerializer(idea_queryset().get(pk=idea.pk)).data
        publish(IDEAS, 'newComment', data)
        return Response(data, status=status.HTTP_200_OK)
