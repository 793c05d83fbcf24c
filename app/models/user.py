from typing import Optional
from uuid import UUID
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, StringConstraints, model_validator
from typing_extensions import Annotated
from app.db.schema import AccountType
from app.models.company import CompanyRead


class UserRead(SQLModel):
    id: UUID
    email: str
    username: Optional[str] = None
    mobile: Optional[str] = None
    eco_points: int
    account_type: AccountType
    is_active: bool
    company: Optional[CompanyRead] = None


class UserSignin(SQLModel):
    email: Annotated[EmailStr, StringConstraints(to_lower=True)] = Field(
        description="Registered email address of the user.",
        max_length=255
    )
    password: str = Field(
        min_length=8,
        max_length=128,
        description="Plain text password."
    )


class UserCreate(SQLModel):
    """
    DTO for account registration.
    Company accounts also name the collection company they operate.
    """
    email: Annotated[EmailStr, StringConstraints(to_lower=True)] = Field(
        description="Unique email address for signin.",
        max_length=255
    )
    password: str = Field(
        min_length=8,
        max_length=128,
        description="Plain text password."
    )
    username: str = Field(
        min_length=1,
        max_length=50,
        description="Display name."
    )
    mobile: Optional[str] = Field(default=None, max_length=20)
    account_type: AccountType = Field(
        default=AccountType.USER,
        description="'user' to submit e-waste, 'company' to collect it."
    )
    company_name: Optional[str] = Field(
        default=None,
        min_length=2,
        max_length=100,
        description="Required for company accounts."
    )

    @model_validator(mode="after")
    def company_needs_name(self):
        if self.account_type == AccountType.COMPANY and not self.company_name:
            raise ValueError("company_name is required for company accounts.")
        return self
