"""Error taxonomy shared by every app and the DRF handler that renders it."""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = 'Something went wrong!'


class TeamHubError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = GENERIC_ERROR_MESSAGE
    code = 'error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(TeamHubError):
    """A referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'
    code = 'not_found'


class ValidationError(TeamHubError):
    """Malformed or out-of-domain input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid input.'
    code = 'invalid'


class AuthorizationError(TeamHubError):
    """The actor lacks the role or ownership the operation needs."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have permission to perform this action.'
    code = 'forbidden'


class ConflictError(TeamHubError):
    """The write collides with existing state (duplicates, stale versions)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Conflict with existing data.'
    code = 'conflict'


def exception_handler(exc, context):
    """
    Render TeamHubError subclasses as {"error", "code"} with their status,
    let DRF handle its own exceptions, and turn anything else into a
    logged generic 500.
    """
    if isinstance(exc, TeamHubError):
        return Response({'error': exc.message, 'code': exc.code}, status=exc.status_code)

    response = drf_exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown view'
    logger.exception(f"Unhandled error in {view_name}: {exc}")
    return Response({'error': GENERIC_ERROR_MESSAGE}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
