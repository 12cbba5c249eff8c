from typing import Any, Optional
from uuid import UUID

import structlog
from sqlalchemy.orm import Session

from compass import models

logger = structlog.get_logger()


def record_audit(
    session: Session,
    actor_user_id: Optional[UUID],
    action: str,
    entity_type: str,
    entity_id: Optional[UUID],
    payload: Optional[dict[str, Any]] = None,
) -> models.AuditLog:
    """Append an audit row in the caller's transaction; it commits or rolls back with the change it describes."""
    audit = models.AuditLog(
        actor_user_id=actor_user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        payload=payload,
    )
    session.add(audit)
    session.flush()
    logger.info(
        "audit_recorded",
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id else None,
        actor_user_id=str(actor_user_id) if actor_user_id else None,
    )
    return audit
