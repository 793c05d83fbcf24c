from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_dashboard_service
from app.db.schema import User
from app.models.dashboard import DashboardRead
from app.services.dashboard import DashboardService

router = APIRouter()


@router.get(
    "/",
    response_model=DashboardRead,
    status_code=status.HTTP_200_OK,
    summary="Dashboard Summary",
    description="Profile banner, eco points and the unread notification badge."
)
def get_dashboard(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.get_dashboard(current_user)
