from typing import Dict, List, Optional
import uuid
from loguru import logger
from sqlmodel import Session, select, col
from fastapi import HTTPException, BackgroundTasks, status

from app.core.audit import perform_audit_log
from app.db.schema import (
    User, Company, EwasteRequest, NotificationRead, AuditAction
)
from app.models.ewaste_request import (
    EwasteRequestCreate, EwasteRequestUpdate, EwasteRequestRead, HistoryCard
)
from app.services import status_lifecycle
from app.utils.file_storage import save_base64_image, delete_image
from app.utils.formatting import format_currency


UNKNOWN_COMPANY = "Unknown Company"
EDITABLE_FIELDS = ("name", "quantity", "weight", "prize")


def ensure_version(req: EwasteRequest, expected_version: Optional[int]):
    """Rejects a write based on a stale read. No precondition means last write wins."""
    if expected_version is not None and expected_version != req.version:
        logger.warning(
            f"Stale write on request {req.id}: expected v{expected_version}, stored v{req.version}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This request was modified by someone else. Reload and try again."
        )


class EwasteRequestService:
    """
    The submitting user's side: create, history, edit and delete.
    """

    def __init__(self, session: Session):
        self.session = session

    def _get_owned_request(self, user: User, request_id: uuid.UUID) -> EwasteRequest:
        req = self.session.get(EwasteRequest, request_id)
        if not req:
            raise HTTPException(status_code=404, detail="Request not found.")
        if req.user_id != user.id:
            raise HTTPException(
                status_code=403, detail="You can only manage your own submissions.")
        return req

    def _company_names(self, company_ids: List[uuid.UUID]) -> Dict[uuid.UUID, str]:
        if not company_ids:
            return {}
        companies = self.session.exec(
            select(Company).where(col(Company.id).in_(set(company_ids)))
        ).all()
        return {c.id: c.company_name for c in companies}

    def _to_card(self, req: EwasteRequest, company_names: Dict[uuid.UUID, str]) -> HistoryCard:
        base = EwasteRequestRead.model_validate(req, from_attributes=True)
        return HistoryCard(
            **base.model_dump(),
            company_name=company_names.get(req.company_id) or UNKNOWN_COMPANY,
            display_value=format_currency(req.prize),
            status_label=status_lifecycle.status_label(req.status),
            status_class=status_lifecycle.status_class(req.status),
            can_edit=status_lifecycle.can_edit(req.status)
        )

    def create_request(
        self,
        user: User,
        data: EwasteRequestCreate,
        background_tasks: BackgroundTasks
    ) -> HistoryCard:
        company = self.session.get(Company, data.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found.")

        image_url = save_base64_image(data.image_base64)

        req = EwasteRequest(
            user_id=user.id,
            company_id=company.id,
            name=data.name,
            quantity=data.quantity,
            weight=data.weight,
            prize=data.prize,
            address=data.address,
            image_url=image_url
        )

        try:
            self.session.add(req)
            self.session.commit()
            self.session.refresh(req)
        except Exception as e:
            self.session.rollback()
            logger.error(f"Request creation failed: {e}")
            delete_image(image_url)
            raise HTTPException(
                status_code=500, detail="Could not submit the request.")

        logger.info(f"User {user.id} submitted request {req.id} to company {company.id}")
        background_tasks.add_task(
            perform_audit_log,
            user_id=user.id,
            entity_type="EwasteRequest",
            entity_id=req.id,
            action=AuditAction.CREATE,
            changes={"name": req.name, "company_id": company.id}
        )
        return self._to_card(req, {company.id: company.company_name})

    def list_history(self, user: User) -> List[HistoryCard]:
        """
        All submissions of the user, newest first, with company names
        resolved in one batch.
        """
        requests = self.session.exec(
            select(EwasteRequest)
            .where(EwasteRequest.user_id == user.id)
            .order_by(col(EwasteRequest.created_at).desc())
        ).all()

        names = self._company_names([r.company_id for r in requests])
        return [self._to_card(r, names) for r in requests]

    def update_request(
        self,
        user: User,
        request_id: uuid.UUID,
        data: EwasteRequestUpdate,
        background_tasks: BackgroundTasks
    ) -> HistoryCard:
        req = self._get_owned_request(user, request_id)

        if not status_lifecycle.can_edit(req.status):
            raise HTTPException(
                status_code=400, detail="Approved requests can no longer be edited.")

        ensure_version(req, data.expected_version)

        changes = data.model_dump(include=set(EDITABLE_FIELDS), exclude_none=True)
        for key, value in changes.items():
            setattr(req, key, value)
        req.version += 1

        try:
            self.session.add(req)
            self.session.commit()
            self.session.refresh(req)
        except Exception as e:
            self.session.rollback()
            logger.error(f"Request update failed for {request_id}: {e}")
            raise HTTPException(
                status_code=500, detail="Could not update the request.")

        background_tasks.add_task(
            perform_audit_log,
            user_id=user.id,
            entity_type="EwasteRequest",
            entity_id=req.id,
            action=AuditAction.UPDATE,
            changes=changes
        )
        return self._to_card(req, self._company_names([req.company_id]))

    def delete_request(
        self,
        user: User,
        request_id: uuid.UUID,
        background_tasks: BackgroundTasks,
        expected_version: Optional[int] = None
    ):
        req = self._get_owned_request(user, request_id)
        ensure_version(req, expected_version)
        image_url = req.image_url

        try:
            read_markers = self.session.exec(
                select(NotificationRead).where(
                    NotificationRead.request_id == req.id)
            ).all()
            for marker in read_markers:
                self.session.delete(marker)
            self.session.flush()  # Markers reference the request, so they go first
            self.session.delete(req)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(f"Request deletion failed for {request_id}: {e}")
            raise HTTPException(
                status_code=500, detail="Could not delete the request.")

        delete_image(image_url)
        logger.info(f"User {user.id} deleted request {request_id}")
        background_tasks.add_task(
            perform_audit_log,
            user_id=user.id,
            entity_type="EwasteRequest",
            entity_id=request_id,
            action=AuditAction.DELETE,
            changes={}
        )
        return {"message": "Request deleted successfully."}
