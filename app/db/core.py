from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine
from loguru import logger

from app.core.config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite connections are shared between the threadpool workers
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))


def init_db():
    """Creates every table registered on the SQLModel metadata."""
    from app.db import schema  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database schema ready")


def get_session():
    with Session(engine) as session:
        yield session
