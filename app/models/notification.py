from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlmodel import SQLModel

from app.db.schema import RequestStatus


class NotificationItem(SQLModel):
    request_id: UUID
    title: str
    status: RequestStatus
    status_label: str
    message: str
    detail: Optional[str] = None
    changed_at: Optional[datetime] = None


class NotificationFeed(SQLModel):
    unread_count: int
    notifications: List[NotificationItem]
