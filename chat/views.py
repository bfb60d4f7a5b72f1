# teamhub/chat/views.py
from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema

from accounts.serializers import UserSummarySerializer
from . import services
from .models import Chat
from .serializers import (
    ChatSerializer, ChatCreateSerializer, MessageSerializer,
    MessageCreateSerializer, MemberIdsSerializer,
)

User = get_user_model()


class ChatListCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        chats = Chat.objects.filter(participants=request.user).prefetch_related('participants')
        return Response(ChatSerializer(chats, many=True, context={'request': request}).data)

    @swagger_auto_schema(
        operation_summary="Start a direct or group chat",
        request_body=ChatCreateSerializer,
        responses={201: ChatSerializer}
    )
    def post(self, request):
        serializer = ChatCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        chat = services.create_chat(request.user, data['type'], data['participants'], data['name'])
        return Response(ChatSerializer(chat, context={'request': request}).data, status=status.HTTP_201_CREATED)


class ChatDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, chat_id):
        chat = services.get_chat_for(request.user, chat_id)
        return Response(ChatSerializer(chat, context={'request': request}).data)

    def delete(self, request, chat_id):
        chat = services.get_chat_for(request.user, chat_id)
        services.delete_chat(chat, request.user)
        return Response({'success': True}, status=status.HTTP_200_OK)


class ChatMessagesView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, chat_id):
        chat = services.get_chat_for(request.user, chat_id)
        messages = chat.messages.select_related('sender').prefetch_related('read_by')
        return Response(MessageSerializer(messages, many=True).data)

    @swagger_auto_schema(
        operation_summary="Send a message",
        request_body=MessageCreateSerializer,
        responses={201: MessageSerializer}
    )
    def post(self, request, chat_id):
        chat = services.get_chat_for(request.user, chat_id)
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.send_message(chat, request.user, serializer.validated_data['content'])
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class ChatReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(operation_summary="Mark every message in the chat as read", request_body=None)
    def post(self, request, chat_id):
        chat = services.get_chat_for(request.user, chat_id)
        marked = services.mark_read(chat, request.user)
        return Response({'marked': marked}, status=status.HTTP_200_OK)


class GroupMembersView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Add members to a group chat",
        request_body=MemberIdsSerializer,
        responses={200: ChatSerializer}
    )
    def post(self, request, chat_id):
        chat = services.get_chat_for(request.user, chat_id)
        serializer = MemberIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        chat = services.add_members(chat, request.user, serializer.validated_data['userIds'])
        return Response(ChatSerializer(chat, context={'request': request}).data)


class GroupMemberDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, chat_id, user_id):
        chat = services.get_chat_for(request.user, chat_id)
        chat = services.remove_member(chat, request.user, user_id)
        return Response(ChatSerializer(chat, context={'request': request}).data)


class AvailableUsersView(generics.ListAPIView):
    serializer_class = UserSummarySerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return User.objects.filter(is_active=True).exclude(pk=self.request.user.pk).order_by('name')
