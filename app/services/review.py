from datetime import datetime
from typing import Dict, List, Optional
import uuid
from loguru import logger
from sqlmodel import Session, select, col, func
from fastapi import HTTPException, BackgroundTasks

from app.core.audit import perform_audit_log
from app.db.schema import (
    User, Company, EwasteRequest, RequestStatus, AuditAction
)
from app.models.ewaste_request import EwasteRequestRead
from app.models.review import (
    StatusFilter, StatusCounts, ReviewCard, ReviewBoard,
    SubmitterProfile, RequestDetails, StatusChangeResult
)
from app.services import status_lifecycle
from app.services.ewaste_request import ensure_version
from app.utils.formatting import format_currency, or_default


class ReviewService:
    """
    The collection company's side: board, details and status changes.
    """

    def __init__(self, session: Session):
        self.session = session

    def _get_company_request(self, company: Company, request_id: uuid.UUID) -> EwasteRequest:
        req = self.session.get(EwasteRequest, request_id)
        if not req or req.company_id != company.id:
            raise HTTPException(status_code=404, detail="Request not found.")
        return req

    def _submitters(self, user_ids: List[uuid.UUID]) -> Dict[uuid.UUID, User]:
        if not user_ids:
            return {}
        users = self.session.exec(
            select(User).where(col(User.id).in_(set(user_ids)))
        ).all()
        return {u.id: u for u in users}

    def _to_card(self, req: EwasteRequest, submitter: Optional[User]) -> ReviewCard:
        base = EwasteRequestRead.model_validate(req, from_attributes=True)
        actions = status_lifecycle.review_actions(req.status)
        return ReviewCard(
            **base.model_dump(),
            submitter_name=or_default(submitter.username if submitter else None),
            display_value=format_currency(req.prize),
            status_label=status_lifecycle.status_label(req.status),
            status_color=status_lifecycle.status_color(req.status),
            can_approve=actions.can_approve,
            can_reject=actions.can_reject,
            can_assign=actions.can_assign
        )

    # ==========================================================================
    # READ MODELS
    # ==========================================================================

    def count_by_status(self, company: Company) -> StatusCounts:
        """
        One grouped query over the company's full set of requests.
        Unknown statuses fall into the pending bucket.
        """
        rows = self.session.exec(
            select(EwasteRequest.status, func.count(EwasteRequest.id))
            .where(EwasteRequest.company_id == company.id)
            .group_by(EwasteRequest.status)
        ).all()

        counts = StatusCounts()
        for raw_status, amount in rows:
            bucket = status_lifecycle.effective_status(raw_status).value
            setattr(counts, bucket, getattr(counts, bucket) + amount)
            counts.all += amount
        return counts

    def list_requests(
        self,
        company: Company,
        status_filter: StatusFilter = StatusFilter.ALL
    ) -> ReviewBoard:
        statement = (
            select(EwasteRequest)
            .where(EwasteRequest.company_id == company.id)
            .order_by(col(EwasteRequest.created_at).desc())
        )
        if status_filter != StatusFilter.ALL:
            statement = statement.where(
                EwasteRequest.status == RequestStatus(status_filter.value))

        requests = self.session.exec(statement).all()
        submitters = self._submitters([r.user_id for r in requests])

        return ReviewBoard(
            filter=status_filter,
            counts=self.count_by_status(company),
            requests=[self._to_card(r, submitters.get(r.user_id)) for r in requests]
        )

    def get_request_details(self, company: Company, request_id: uuid.UUID) -> RequestDetails:
        """
        Card + submitter profile, fetched on demand. A missing account is
        not an error: the profile is simply absent.
        """
        req = self._get_company_request(company, request_id)
        submitter = self.session.get(User, req.user_id)

        profile = None
        if submitter:
            profile = SubmitterProfile(
                username=or_default(submitter.username),
                email=or_default(submitter.email),
                mobile=or_default(submitter.mobile)
            )
        else:
            logger.warning(f"Submitter {req.user_id} of request {req.id} not found")

        return RequestDetails(
            request=self._to_card(req, submitter),
            submitter=profile,
            pickup_address=or_default(req.address)
        )

    # ==========================================================================
    # STATUS CHANGES
    # ==========================================================================

    def change_status(
        self,
        actor: User,
        company: Company,
        request_id: uuid.UUID,
        target: RequestStatus,
        background_tasks: BackgroundTasks,
        agent_name: Optional[str] = None,
        agent_phone: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> StatusChangeResult:
        req = self._get_company_request(company, request_id)

        try:
            plan = status_lifecycle.plan_transition(
                req.status, target, agent_name=agent_name, agent_phone=agent_phone)
        except status_lifecycle.TransitionError as e:
            logger.warning(f"Refused status change on {req.id} to {target}: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        ensure_version(req, expected_version)

        old_status = req.status
        for key, value in plan.changes.items():
            setattr(req, key, value)
        req.status_changed_at = datetime.utcnow()
        req.version += 1

        try:
            self.session.add(req)
            self.session.commit()
            self.session.refresh(req)
        except Exception as e:
            self.session.rollback()
            logger.error(f"Status update failed for {request_id}: {e}")
            raise HTTPException(
                status_code=500, detail="Failed to update status.")

        logger.info(
            f"Request {req.id}: {status_lifecycle.effective_status(old_status).value} -> {req.status.value}")
        background_tasks.add_task(
            perform_audit_log,
            user_id=actor.id,
            entity_type="EwasteRequest",
            entity_id=req.id,
            action=AuditAction.STATUS_CHANGE,
            changes={"from": old_status, **plan.changes}
        )

        return StatusChangeResult(
            id=req.id,
            status=req.status.value,
            agent_name=req.agent_name,
            agent_phone=req.agent_phone,
            version=req.version
        )

    def approve(self, actor: User, company: Company, request_id: uuid.UUID,
                background_tasks: BackgroundTasks, expected_version: Optional[int] = None):
        return self.change_status(actor, company, request_id, RequestStatus.APPROVED,
                                  background_tasks, expected_version=expected_version)

    def reject(self, actor: User, company: Company, request_id: uuid.UUID,
               background_tasks: BackgroundTasks, expected_version: Optional[int] = None):
        return self.change_status(actor, company, request_id, RequestStatus.REJECTED,
                                  background_tasks, expected_version=expected_version)

    def assign_agent(self, actor: User, company: Company, request_id: uuid.UUID,
                     agent_name: str, agent_phone: str,
                     background_tasks: BackgroundTasks, expected_version: Optional[int] = None):
        return self.change_status(actor, company, request_id, RequestStatus.ASSIGNED,
                                  background_tasks, agent_name=agent_name,
                                  agent_phone=agent_phone, expected_version=expected_version)
