from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.core.dependencies import get_current_user, get_request_service
from app.db.schema import User
from app.models.ewaste_request import (
    EwasteRequestCreate, EwasteRequestUpdate, HistoryCard
)
from app.services.ewaste_request import EwasteRequestService

router = APIRouter()


@router.post(
    "/",
    response_model=HistoryCard,
    status_code=status.HTTP_201_CREATED,
    summary="Submit E-Waste",
    description="Hand an e-waste item over to a collection company. Starts as 'pending'."
)
def create_request(
    data: EwasteRequestCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: EwasteRequestService = Depends(get_request_service)
):
    return service.create_request(current_user, data, background_tasks)


@router.get(
    "/",
    response_model=List[HistoryCard],
    status_code=status.HTTP_200_OK,
    summary="Submission History",
    description="All of your submissions, newest first, with status badges and edit flags."
)
def list_history(
    current_user: User = Depends(get_current_user),
    service: EwasteRequestService = Depends(get_request_service)
):
    return service.list_history(current_user)


@router.patch(
    "/{request_id}",
    response_model=HistoryCard,
    status_code=status.HTTP_200_OK,
    summary="Edit Submission",
    description="Update name, quantity, weight or prize. Not allowed once approved."
)
def update_request(
    request_id: UUID,
    data: EwasteRequestUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: EwasteRequestService = Depends(get_request_service)
):
    return service.update_request(current_user, request_id, data, background_tasks)


@router.delete(
    "/{request_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete Submission",
    description="Permanently removes the submission. There is no undo."
)
def delete_request(
    request_id: UUID,
    background_tasks: BackgroundTasks,
    expected_version: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    service: EwasteRequestService = Depends(get_request_service)
):
    return service.delete_request(
        current_user, request_id, background_tasks, expected_version=expected_version)
