from typing import Optional
from uuid import UUID
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from app.core.dependencies import (
    get_current_user, get_current_company, get_review_service
)
from app.db.schema import User, Company
from app.models.review import (
    StatusFilter, ReviewBoard, RequestDetails,
    AgentAssignment, StatusChangeOptions, StatusChangeResult
)
from app.services.review import ReviewService

router = APIRouter()


@router.get(
    "/requests",
    response_model=ReviewBoard,
    status_code=status.HTTP_200_OK,
    summary="Collection Requests",
    description="Requests addressed to your company, filtered by status, with per-status counters."
)
def list_requests(
    status_filter: StatusFilter = Query(StatusFilter.ALL, alias="status"),
    company: Company = Depends(get_current_company),
    service: ReviewService = Depends(get_review_service)
):
    return service.list_requests(company, status_filter)


@router.get(
    "/requests/{request_id}",
    response_model=RequestDetails,
    status_code=status.HTTP_200_OK,
    summary="Request Details",
    description="The request together with the submitter's contact profile."
)
def get_request_details(
    request_id: UUID,
    company: Company = Depends(get_current_company),
    service: ReviewService = Depends(get_review_service)
):
    return service.get_request_details(company, request_id)


@router.post(
    "/requests/{request_id}/approve",
    response_model=StatusChangeResult,
    status_code=status.HTTP_200_OK,
    summary="Approve Request"
)
def approve_request(
    request_id: UUID,
    background_tasks: BackgroundTasks,
    options: Optional[StatusChangeOptions] = None,
    current_user: User = Depends(get_current_user),
    company: Company = Depends(get_current_company),
    service: ReviewService = Depends(get_review_service)
):
    expected_version = options.expected_version if options else None
    return service.approve(current_user, company, request_id,
                           background_tasks, expected_version=expected_version)


@router.post(
    "/requests/{request_id}/reject",
    response_model=StatusChangeResult,
    status_code=status.HTTP_200_OK,
    summary="Reject Request"
)
def reject_request(
    request_id: UUID,
    background_tasks: BackgroundTasks,
    options: Optional[StatusChangeOptions] = None,
    current_user: User = Depends(get_current_user),
    company: Company = Depends(get_current_company),
    service: ReviewService = Depends(get_review_service)
):
    expected_version = options.expected_version if options else None
    return service.reject(current_user, company, request_id,
                          background_tasks, expected_version=expected_version)


@router.post(
    "/requests/{request_id}/assign",
    response_model=StatusChangeResult,
    status_code=status.HTTP_200_OK,
    summary="Assign Pickup Agent",
    description="Sets status to 'assigned' with the agent's name and phone. Both are required."
)
def assign_agent(
    request_id: UUID,
    data: AgentAssignment,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    company: Company = Depends(get_current_company),
    service: ReviewService = Depends(get_review_service)
):
    return service.assign_agent(
        current_user, company, request_id,
        agent_name=data.agent_name,
        agent_phone=data.agent_phone,
        background_tasks=background_tasks,
        expected_version=data.expected_version
    )
