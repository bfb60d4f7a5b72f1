from django.urls import path
from .views import (
    ChatListCreateView, ChatDetailView, ChatMessagesView, ChatReadView,
    GroupMembersView, GroupMemberDetailView, AvailableUsersView,
)

urlpatterns = [
    path('', ChatListCreateView.as_view(), name='chat-list-create'),
    path('users/', AvailableUsersView.as_view(), name='chat-available-users'),
    path('<int:chat_id>/', ChatDetailView.as_view(), name='chat-detail'),
    path('<int:chat_id>/messages/', ChatMessagesView.as_view(), name='chat-messages'),
    path('<int:chat_id>/read/', ChatReadView.as_view(), name='chat-read'),
    path('<int:chat_id>/members/', GroupMembersView.as_view(), name='chat-members'),
    path('<int:chat_id>/members/<int:user_id>/', GroupMemberDetailView.as_view(), name='chat-member-detail'),
]
