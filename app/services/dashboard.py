from sqlmodel import Session

from app.db.schema import User
from app.models.dashboard import DashboardRead
from app.services.notification import NotificationService
from app.utils.formatting import display_name, or_default


class DashboardService:
    def __init__(self, session: Session):
        self.session = session

    def get_dashboard(self, user: User) -> DashboardRead:
        unread = NotificationService(self.session).unread_count(user)
        return DashboardRead(
            display_name=display_name(user.username, user.email),
            email=user.email,
            mobile=or_default(user.mobile, "Not provided"),
            eco_points=user.eco_points or 0,
            unread_count=unread
        )
