"""Authenticate WebSocket connections with a JWT access token passed as ?token=."""
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_user(user_id):
    User = get_user_model()
    try:
        return User.objects.get(**{api_settings.USER_ID_FIELD: user_id}, is_active=True)
    except User.DoesNotExist:
        return AnonymousUser()


class JWTQueryAuthMiddleware(BaseMiddleware):

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        scope['user'] = AnonymousUser()

        query = parse_qs(scope.get('query_string', b'').decode())
        raw = query.get('token', [None])[0]
        if raw:
            try:
                token = AccessToken(raw)
                scope['user'] = await get_user(token[api_settings.USER_ID_CLAIM])
            except (TokenError, KeyError) as e:
                logger.info(f"Rejected WebSocket token: {e}")

        return await super().__call__(scope, receive, send)
