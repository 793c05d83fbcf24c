from typing import List
from sqlmodel import Session, select, col

from app.db.schema import Company
from app.models.company import CompanyRead


class CompanyService:
    def __init__(self, session: Session):
        self.session = session

    def list_companies(self) -> List[CompanyRead]:
        """Lookup list for the submission form (id -> display name)."""
        companies = self.session.exec(
            select(Company).order_by(col(Company.company_name).asc())
        ).all()
        return [CompanyRead(id=c.id, company_name=c.company_name) for c in companies]
