import logging

from .models import AuditLogEntry

logger = logging.getLogger(__name__)


def record(actor, action, entity_type, entity_id=None, entity_title='', details=None):
    entry = AuditLogEntry.objects.create(
        actor=actor if actor is not None and actor.is_authenticated else None,
        actor_name=getattr(actor, 'name', '') or getattr(actor, 'email', '') or '',
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_title=entity_title or '',
        details=details or {},
    )
    logger.info(f"Audit: {entry.actor_name or '[system]'} {action} {entity_type} {entity_id} '{entry.entity_title}'")
    return entry
