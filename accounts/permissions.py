"""
Role-based capability checks.

Every write operation in the API asks one question, "does this actor hold
capability X?", answered by the ROLE_CAPABILITIES table below. Ownership
rules ("the creator, or anyone allowed to moderate") go through
can_modify_owned so they read the same everywhere.
"""
from enum import Enum

from rest_framework import permissions

from teamhub.exceptions import AuthorizationError
from .models import Role


class Capability(Enum):
    MANAGE_TASKS = 'manage_tasks'
    MODERATE_CONTENT = 'moderate_content'
    SHARE_RESOURCES = 'share_resources'
    MANAGE_PROJECTS = 'manage_projects'
    MANAGE_USERS = 'manage_users'
    MANAGE_MUSIC = 'manage_music'
    VIEW_AUDIT_LOG = 'view_audit_log'


_LEADER_CAPABILITIES = frozenset({
    Capability.MANAGE_TASKS,
    Capability.MODERATE_CONTENT,
    Capability.SHARE_RESOURCES,
    Capability.MANAGE_PROJECTS,
})

ROLE_CAPABILITIES = {
    Role.USER: frozenset(),
    Role.TEAM_LEADER: _LEADER_CAPABILITIES,
    Role.ADMIN: frozenset(Capability),
}


def capabilities_for(role):
    try:
        return ROLE_CAPABILITIES[Role(role)]
    except ValueError:
        return frozenset()


def has_capability(user, capability):
    if user is None or not user.is_authenticated:
        return False
    return capability in capabilities_for(user.role)


def require_capability(user, capability, message=None):
    if not has_capability(user, capability):
        raise AuthorizationError(message or f"Access denied. Requires '{capability.value}'.")


def can_modify_owned(user, owner_id, capability=Capability.MODERATE_CONTENT):
    """Owners may always modify their own content; others need the capability."""
    if user is None or not user.is_authenticated:
        return False
    return owner_id == user.id or has_capability(user, capability)


def capability_required(capability):
    """Build a DRF permission class that gates a whole view on one capability."""

    class CapabilityPermission(permissions.BasePermission):
        message = f"Access denied. Requires '{capability.value}'."

        def has_permission(self, request, view):
            return has_capability(request.user, capability)

    CapabilityPermission.__name__ = f"Requires{capability.name.title().replace('_', '')}"
    return CapabilityPermission
