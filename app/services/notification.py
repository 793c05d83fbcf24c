from datetime import datetime
from typing import List
import uuid
from loguru import logger
from sqlmodel import Session, select, col, or_, and_, func
from fastapi import HTTPException

from app.db.schema import (
    User, EwasteRequest, RequestStatus, NotificationCursor, NotificationRead
)
from app.models.notification import NotificationItem, NotificationFeed
from app.services import status_lifecycle


# Requests that never went through a tracked transition fall back to their creation time
_changed_at = func.coalesce(EwasteRequest.status_changed_at, EwasteRequest.created_at)


def _change_time(req: EwasteRequest) -> datetime:
    return req.status_changed_at or req.created_at


class NotificationService:
    """
    Unread status-change notifications.

    Read state lives server side as a per-user cursor (everything changed at
    or before it is read) plus one marker per request acknowledged since the
    cursor last moved. Clearing advances the cursor and drops the markers, so
    storage stays bounded.
    """

    def __init__(self, session: Session):
        self.session = session

    def _to_item(self, req: EwasteRequest) -> NotificationItem:
        label = status_lifecycle.status_label(req.status)
        detail = None
        if req.status == RequestStatus.ASSIGNED:
            detail = f"Agent {req.agent_name} has been assigned to collect your e-waste."
        return NotificationItem(
            request_id=req.id,
            title=req.name or "Request",
            status=req.status,
            status_label=label,
            message=f"Status: {label}",
            detail=detail,
            changed_at=_change_time(req)
        )

    def _unread_requests(self, user: User) -> List[EwasteRequest]:
        statement = (
            select(EwasteRequest)
            .join(
                NotificationRead,
                and_(
                    NotificationRead.request_id == EwasteRequest.id,
                    NotificationRead.user_id == user.id
                ),
                isouter=True
            )
            .where(EwasteRequest.user_id == user.id)
            .where(col(EwasteRequest.status).in_(status_lifecycle.NOTIFYING_STATUSES))
            .where(or_(
                col(NotificationRead.request_id).is_(None),
                NotificationRead.seen_changed_at < _changed_at
            ))
            .order_by(_changed_at.desc())
        )

        cursor = self.session.get(NotificationCursor, user.id)
        if cursor:
            statement = statement.where(_changed_at > cursor.last_seen_at)

        return list(self.session.exec(statement).all())

    def list_unread(self, user: User) -> NotificationFeed:
        items = [self._to_item(r) for r in self._unread_requests(user)]
        return NotificationFeed(unread_count=len(items), notifications=items)

    def unread_count(self, user: User) -> int:
        return len(self._unread_requests(user))

    def mark_as_read(self, user: User, request_id: uuid.UUID) -> NotificationFeed:
        """Idempotent: marking the same change twice leaves one marker."""
        req = self.session.get(EwasteRequest, request_id)
        if not req or req.user_id != user.id:
            raise HTTPException(status_code=404, detail="Notification not found.")

        marker = self.session.get(NotificationRead, (user.id, req.id))
        if marker is None:
            marker = NotificationRead(user_id=user.id, request_id=req.id,
                                      seen_changed_at=_change_time(req))
        else:
            marker.seen_changed_at = max(marker.seen_changed_at, _change_time(req))

        try:
            self.session.add(marker)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(f"Marking notification {request_id} read failed: {e}")
            raise HTTPException(
                status_code=500, detail="Could not update notifications.")

        return self.list_unread(user)

    def clear_all(self, user: User) -> NotificationFeed:
        """
        Moves the cursor up to the newest change the user has been shown,
        either in this listing or through an earlier read marker. Changes
        committed later stay unread.
        """
        unread = self._unread_requests(user)
        markers = self.session.exec(
            select(NotificationRead).where(NotificationRead.user_id == user.id)
        ).all()

        seen = [_change_time(r) for r in unread] + [m.seen_changed_at for m in markers]
        if not seen:
            return NotificationFeed(unread_count=0, notifications=[])

        cursor = self.session.get(NotificationCursor, user.id)
        if cursor is None:
            cursor = NotificationCursor(user_id=user.id, last_seen_at=max(seen))
        else:
            cursor.last_seen_at = max([cursor.last_seen_at] + seen)

        try:
            self.session.add(cursor)
            # Every marker is now covered by the cursor
            for marker in markers:
                self.session.delete(marker)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(f"Clearing notifications for user {user.id} failed: {e}")
            raise HTTPException(
                status_code=500, detail="Could not update notifications.")

        logger.info(f"User {user.id} cleared {len(unread)} notifications")
        return NotificationFeed(unread_count=0, notifications=[])
