from uuid import UUID
from sqlmodel import SQLModel


class CompanyRead(SQLModel):
    id: UUID
    company_name: str
