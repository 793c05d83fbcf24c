from uuid import UUID
from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_notification_service
from app.db.schema import User
from app.models.notification import NotificationFeed
from app.services.notification import NotificationService

router = APIRouter()


@router.get(
    "/",
    response_model=NotificationFeed,
    status_code=status.HTTP_200_OK,
    summary="Unread Notifications",
    description="Status changes (approved, rejected, assigned) you have not acknowledged yet."
)
def list_notifications(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return service.list_unread(current_user)


@router.post(
    "/{request_id}/read",
    response_model=NotificationFeed,
    status_code=status.HTTP_200_OK,
    summary="Mark As Read"
)
def mark_as_read(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_as_read(current_user, request_id)


@router.post(
    "/clear",
    response_model=NotificationFeed,
    status_code=status.HTTP_200_OK,
    summary="Clear All",
    description="Acknowledges every unread notification at once."
)
def clear_all(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return service.clear_all(current_user)
