from loguru import logger
from sqlmodel import Session, select
from app.db.core import engine, init_db
from app.db.schema import User, Company, AccountType
from app.services.password import get_password_hash


DEMO_PASSWORD = "change-me-please"

# 1. Collection companies, each operated by its own account
DEFAULT_COMPANIES = {
    "GreenCycle Recyclers": "greencycle@example.com",
    "E-Cycle Hub": "ecyclehub@example.com",
    "Urban Mining Co.": "urbanmining@example.com",
}

# 2. A regular account to submit e-waste with
DEMO_USERS = [
    {
        "email": "demo.user@example.com",
        "username": "demo",
        "mobile": "+91 90000 00000",
        "eco_points": 120,
    },
]


def _get_or_create_account(session: Session, email: str, **fields) -> User:
    account = session.exec(select(User).where(User.email == email)).first()
    if account:
        logger.info(f"Existing account: {email}")
        return account

    account = User(
        email=email,
        hashed_password=get_password_hash(DEMO_PASSWORD),
        **fields
    )
    session.add(account)
    session.flush()  # Flush to get account.id
    logger.info(f"Created account: {email}")
    return account


def seed_companies(session: Session):
    """Creates company accounts and their Company rows if they don't exist."""
    logger.info("--- Seeding Companies ---")

    for company_name, email in DEFAULT_COMPANIES.items():
        account = _get_or_create_account(
            session, email,
            username=company_name,
            account_type=AccountType.COMPANY
        )

        company = session.exec(
            select(Company).where(Company.account_id == account.id)).first()
        if not company:
            session.add(Company(account_id=account.id, company_name=company_name))
            logger.info(f"Created Company: {company_name}")


def seed_users(session: Session):
    logger.info("--- Seeding Users ---")

    for data in DEMO_USERS:
        data = dict(data)
        _get_or_create_account(
            session, data.pop("email"),
            account_type=AccountType.USER,
            **data
        )


def main():
    init_db()

    with Session(engine) as session:
        try:
            seed_companies(session)
            seed_users(session)

            session.commit()
            logger.info("Database seeding completed successfully.")

        except Exception as e:
            session.rollback()
            logger.error(f"Seeding failed: {e}")
            raise e


if __name__ == "__main__":
    main()
