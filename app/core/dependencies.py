from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from app.db.core import get_session
from app.db.schema import User, Company, AccountType
from app.services.user import UserService
from app.services.company import CompanyService
from app.services.dashboard import DashboardService
from app.services.ewaste_request import EwasteRequestService
from app.services.notification import NotificationService
from app.services.review import ReviewService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/users/token")


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    """Creates a UserService instance using the active DB session."""
    return UserService(session)


def get_company_service(session: Session = Depends(get_session)) -> CompanyService:
    return CompanyService(session)


def get_dashboard_service(session: Session = Depends(get_session)) -> DashboardService:
    return DashboardService(session)


def get_request_service(session: Session = Depends(get_session)) -> EwasteRequestService:
    return EwasteRequestService(session)


def get_notification_service(session: Session = Depends(get_session)) -> NotificationService:
    return NotificationService(session)


def get_review_service(session: Session = Depends(get_session)) -> ReviewService:
    return ReviewService(session)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    service: UserService = Depends(get_user_service)
) -> User:
    """
    Validates the JWT token and retrieves the user.
    This is the gatekeeper for protected routes.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = service.verify_access_token(token)
    if not token_data:
        raise credentials_exception

    user = service.get_user_by_id(token_data.user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    return user


def get_current_company(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
) -> Company:
    """Restricts a route to company accounts and resolves their Company."""
    if current_user.account_type != AccountType.COMPANY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only collection companies can access this resource."
        )

    company = service.get_company_for_account(current_user)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found.")
    return company
