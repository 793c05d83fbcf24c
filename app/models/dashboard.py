from sqlmodel import SQLModel, Field


class DashboardRead(SQLModel):
    """
    Header and profile banner of the user dashboard.
    """
    display_name: str = Field(
        description="Username, or the local part of the email when no username is set.")
    email: str
    mobile: str = Field(description="'Not provided' when missing.")
    eco_points: int
    unread_count: int = Field(
        description="Number of unread status-change notifications (badge count).")
