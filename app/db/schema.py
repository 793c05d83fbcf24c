from typing import Optional, Dict, Any
from datetime import datetime
import uuid
from sqlmodel import SQLModel, Field, JSON, Column
from enum import Enum


class AccountType(str, Enum):
    USER = "user"        # Submits e-waste
    COMPANY = "company"  # Collects and processes e-waste


class RequestStatus(str, Enum):
    PENDING = "pending"    # Waiting for the company
    APPROVED = "approved"
    REJECTED = "rejected"
    ASSIGNED = "assigned"  # Pickup agent on the way


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"


class TimestampMixin(SQLModel):
    """
    Standard audit timestamps shared by every persisted entity.
    """
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="UTC timestamp when this record was first persisted. Example: '2025-03-01 14:30:00'"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column_kwargs={"onupdate": datetime.utcnow},
        description="UTC timestamp when this record was last modified. Updates automatically."
    )


class User(TimestampMixin, SQLModel, table=True):
    """
    A registered account. Regular users submit e-waste; company accounts
    operate exactly one Company and review the submissions addressed to it.
    """
    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="The unique identifier for the account."
    )
    email: str = Field(
        unique=True,
        index=True,
        description="The login email address. Example: 'asha@example.com'"
    )
    hashed_password: str = Field(
        description="Salted password hash. Never store plain text."
    )
    username: Optional[str] = Field(
        default=None,
        description="Display name chosen at signup. Example: 'asha'"
    )
    mobile: Optional[str] = Field(
        default=None,
        description="Contact number shown to companies. Example: '+91 98765 43210'"
    )
    eco_points: int = Field(
        default=0,
        description="Incentive balance. Read-only through the API."
    )
    account_type: AccountType = Field(
        default=AccountType.USER,
        description="Whether this account submits ('user') or collects ('company')."
    )
    is_active: bool = Field(
        default=True,
        description="Soft delete flag. If False, the account cannot log in."
    )


class Company(TimestampMixin, SQLModel, table=True):
    """
    A collection company. Requests are addressed to a company, and the
    company's account reviews them.
    """
    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )
    account_id: uuid.UUID = Field(
        foreign_key="user.id",
        unique=True,
        index=True,
        description="The account operating this company."
    )
    company_name: str = Field(
        index=True,
        unique=True,
        description="Display name. Example: 'GreenCycle Recyclers'"
    )


class EwasteRequest(TimestampMixin, SQLModel, table=True):
    """
    One user-submitted e-waste item pending collection.
    """
    __tablename__ = "ewaste_request"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    company_id: uuid.UUID = Field(foreign_key="company.id", index=True)

    name: str = Field(description="Product name. Example: 'Old laptop'")
    quantity: int = Field(default=1)
    weight: float = Field(default=0, description="Weight in kg.")
    prize: float = Field(default=0, description="Quoted value of the item.")
    address: Optional[str] = Field(
        default=None, description="Pickup address.")
    image_url: Optional[str] = Field(default=None)

    status: RequestStatus = Field(default=RequestStatus.PENDING, index=True)
    agent_name: Optional[str] = Field(
        default=None, description="Set iff status is 'assigned'.")
    agent_phone: Optional[str] = Field(
        default=None, description="Set iff status is 'assigned'.")
    status_changed_at: Optional[datetime] = Field(
        default=None,
        index=True,
        description="UTC timestamp of the last status transition. NULL while pending."
    )
    version: int = Field(
        default=1,
        description="Incremented on every write. Clients send it back as 'expected_version'."
    )


class NotificationCursor(SQLModel, table=True):
    """
    Per-user 'last seen' marker. Every status change at or before
    last_seen_at counts as read.
    """
    __tablename__ = "notification_cursor"

    user_id: uuid.UUID = Field(foreign_key="user.id", primary_key=True)
    last_seen_at: datetime = Field(default_factory=datetime.utcnow)


class NotificationRead(SQLModel, table=True):
    """
    Acknowledgement of one request's status change newer than the cursor.
    Rows are pruned whenever the cursor moves past them.
    """
    __tablename__ = "notification_read"

    user_id: uuid.UUID = Field(foreign_key="user.id", primary_key=True)
    request_id: uuid.UUID = Field(
        foreign_key="ewaste_request.id", primary_key=True)
    seen_changed_at: datetime = Field(
        description="The request's status_changed_at the user acknowledged."
    )


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_log"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    actor_user_id: uuid.UUID = Field(index=True)
    entity_type: str
    entity_id: uuid.UUID = Field(index=True)
    action: AuditAction
    changes: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    timestamp: datetime = Field(default_factory=datetime.utcnow)
