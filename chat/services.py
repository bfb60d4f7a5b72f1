import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from realtime.publisher import chat_topic, publish, publish_to_users
from teamhub.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .models import Chat, Message

logger = logging.getLogger(__name__)

User = get_user_model()


def direct_key(first_id, second_id):
    low, high = sorted([first_id, second_id])
    return f'{low}:{high}'


def get_chat_for(user, chat_id):
    try:
        return Chat.objects.get(pk=chat_id, participants=user)
    except Chat.DoesNotExist:
        raise NotFoundError('Chat not found or not a member')


def create_chat(actor, chat_type, participant_ids, name=''):
    ids = set(participant_ids) | {actor.id}
    if User.objects.filter(id__in=ids).count() != len(ids):
        raise ValidationError('Unknown participant')

    key = None
    if chat_type == 'direct':
        if len(ids) != 2:
            raise ValidationError('Direct chats must have exactly 2 participants')
        key = direct_key(*ids)
        if Chat.objects.filter(direct_key=key).exists():
            raise ConflictError('Chat already exists')
        name = ''
    elif not (name or '').strip():
        raise ValidationError('Group chats need a name')

    try:
        with transaction.atomic():
            chat = Chat.objects.create(
                type=chat_type,
                name=(name or '').strip(),
                direct_key=key,
                admin=actor if chat_type == 'group' else None,
            )
            chat.participants.set(ids)
    except IntegrityError:
        raise ConflictError('Chat already exists')

    logger.info(f"{chat_type.capitalize()} chat {chat.id} created by {actor.email}")
    return chat


def send_message(chat, sender, content):
    """Store a message, mark it read by its sender and fan it out."""
    from .serializers import MessageSerializer

    if not (content or '').strip():
        raise ValidationError('Message content is required')

    with transaction.atomic():
        message = Message.objects.create(chat=chat, sender=sender, content=content)
        message.read_by.add(sender)
        chat.last_message_at = message.created_at
        chat.save(update_fields=['last_message_at', 'updated_at'])

    payload = MessageSerializer(message).data
    publish(chat_topic(chat.id), 'newMessage', payload)
    others = chat.participants.exclude(pk=sender.pk).values_list('id', flat=True)
    publish_to_users(list(others), 'chatNotification', {'chatId': chat.id, 'message': payload})
    return message


def mark_read(chat, user):
    unread = list(chat.messages.exclude(read_by=user).values_list('id', flat=True))
    if unread:
        user.read_messages.add(*unread)
    return len(unread)


def delete_chat(chat, actor):
    if chat.is_group and chat.admin_id != actor.id:
        raise AuthorizationError('Only the group admin can delete this chat')
    chat_id = chat.id
    with transaction.atomic():
        chat.messages.all().delete()
        chat.delete()
    logger.info(f"Chat {chat_id} deleted by {actor.email}")


def require_group_admin(chat, actor):
    if not chat.is_group:
        raise ValidationError('Not a group chat')
    if chat.admin_id != actor.id:
        raise AuthorizationError('Only the group admin can manage members')


def add_members(chat, actor, user_ids):
    require_group_admin(chat, actor)
    if not user_ids:
        raise ValidationError('Invalid user IDs provided')
    users = list(User.objects.filter(id__in=set(user_ids)))
    if len(users) != len(set(user_ids)):
        raise ValidationError('Invalid user IDs provided')
    chat.participants.add(*users)
    chat.save(update_fields=['updated_at'])
    return chat


def remove_member(chat, actor, user_id):
    if not chat.is_group:
        raise ValidationError('Not a group chat')
    if chat.admin_id != actor.id and user_id != actor.id:
        raise AuthorizationError('Only the group admin can remove other members')
    if user_id == chat.admin_id:
        raise ValidationError('The group admin cannot be removed')
    if not chat.participants.filter(pk=user_id).exists():
        raise NotFoundError('Member not found')
    chat.participants.remove(user_id)
    chat.save(update_fields=['updated_at'])
    return chat

