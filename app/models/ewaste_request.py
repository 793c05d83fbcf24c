from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlmodel import SQLModel, Field

from app.db.schema import RequestStatus


class EwasteRequestBase(SQLModel):
    name: str = Field(min_length=1, max_length=120,
                      description="Product name. Example: 'Old laptop'")
    quantity: int = Field(default=1, ge=1)
    weight: float = Field(default=0, ge=0, description="Weight in kg.")
    prize: float = Field(default=0, ge=0, description="Quoted value.")


class EwasteRequestCreate(EwasteRequestBase):
    """
    Payload submitted by a user to hand an item over to a company.
    """
    company_id: UUID
    address: Optional[str] = Field(default=None, max_length=255)
    image_base64: Optional[str] = Field(
        default=None,
        description="Optional photo as a data URL or bare base64 string."
    )


class EwasteRequestUpdate(SQLModel):
    """
    Partial edit. Only the provided fields are written.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    quantity: Optional[int] = Field(default=None, ge=1)
    weight: Optional[float] = Field(default=None, ge=0)
    prize: Optional[float] = Field(default=None, ge=0)
    expected_version: Optional[int] = Field(
        default=None,
        description="If set, the edit is refused when the stored version differs."
    )


class EwasteRequestRead(EwasteRequestBase):
    id: UUID
    user_id: UUID
    company_id: UUID
    address: Optional[str] = None
    image_url: Optional[str] = None
    status: RequestStatus
    agent_name: Optional[str] = None
    agent_phone: Optional[str] = None
    status_changed_at: Optional[datetime] = None
    version: int
    created_at: datetime


class HistoryCard(EwasteRequestRead):
    """
    One card of the user's submission history.
    """
    company_name: str = Field(
        description="Addressed company, 'Unknown Company' when it no longer exists.")
    display_value: str = Field(description="Prize with currency glyph. Example: '₹450'")
    status_label: str = Field(description="Example: 'PENDING'")
    status_class: str = Field(description="Example: 'status-pending'")
    can_edit: bool
