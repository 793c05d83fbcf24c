from enum import Enum
from typing import List, Optional
from uuid import UUID
from sqlmodel import SQLModel, Field

from app.models.ewaste_request import EwasteRequestRead


class StatusFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ASSIGNED = "assigned"


class StatusCounts(SQLModel):
    """
    Live counters for the filter buttons. The four status buckets
    partition the company's requests, so they always sum to 'all'.
    """
    all: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    assigned: int = 0


class ReviewCard(EwasteRequestRead):
    submitter_name: str = Field(description="'N/A' when the submitter is unknown.")
    display_value: str
    status_label: str
    status_color: str = Field(description="Badge colour. Example: '#ffa500'")
    can_approve: bool
    can_reject: bool
    can_assign: bool


class ReviewBoard(SQLModel):
    filter: StatusFilter
    counts: StatusCounts
    requests: List[ReviewCard]


class SubmitterProfile(SQLModel):
    username: str
    email: str
    mobile: str


class RequestDetails(SQLModel):
    request: ReviewCard
    submitter: Optional[SubmitterProfile] = Field(
        default=None,
        description="NULL when the submitting account no longer exists."
    )
    pickup_address: str


class StatusChangeOptions(SQLModel):
    expected_version: Optional[int] = Field(
        default=None,
        description="If set, the change is refused when the stored version differs."
    )


class AgentAssignment(StatusChangeOptions):
    """
    Payload for the Assign Agent action. Blank values are rejected
    without writing anything.
    """
    agent_name: str = Field(default="", max_length=100)
    agent_phone: str = Field(default="", max_length=20)


class StatusChangeResult(SQLModel):
    id: UUID
    status: str
    agent_name: Optional[str] = None
    agent_phone: Optional[str] = None
    version: int
