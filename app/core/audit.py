import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict
from loguru import logger
from sqlmodel import Session

from app.db.schema import AuditLog, AuditAction
from app.db.core import engine


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (uuid.UUID, datetime)):
        return str(value)
    return value


def perform_audit_log(
    user_id: uuid.UUID,
    entity_type: str,
    entity_id: uuid.UUID,
    action: AuditAction,
    changes: Dict[str, Any],
):
    """
    Background worker.
    Creates its OWN session using the global engine, since the request
    session is already closed when background tasks run.
    """
    try:
        with Session(engine) as session:
            log_entry = AuditLog(
                actor_user_id=user_id,
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                changes={k: _jsonable(v) for k, v in changes.items()},
                timestamp=datetime.utcnow()
            )
            session.add(log_entry)
            session.commit()

    except Exception:
        # Audit failures must never surface to the client
        logger.exception(
            f"Audit log failed for {entity_type} {entity_id} ({action.value})")
