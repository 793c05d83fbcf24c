from typing import List
from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_company_service
from app.db.schema import User
from app.models.company import CompanyRead
from app.services.company import CompanyService

router = APIRouter()


@router.get(
    "/",
    response_model=List[CompanyRead],
    status_code=status.HTTP_200_OK,
    summary="List Companies",
    description="Collection companies a request can be addressed to."
)
def list_companies(
    current_user: User = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service)
):
    return service.list_companies()
