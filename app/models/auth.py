from uuid import UUID
from sqlmodel import SQLModel

from app.db.schema import AccountType


class Token(SQLModel):
    access_token: str
    refresh_token: str
    token_type: str
    account_type: AccountType


class TokenAccess(SQLModel):
    access_token: str


class TokenRefresh(SQLModel):
    refresh_token: str


class TokenData(SQLModel):
    user_id: UUID
