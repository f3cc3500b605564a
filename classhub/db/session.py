# classhub/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from classhub.core.config import settings

# SQLite needs check_same_thread off: requests run on a threadpool
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {},
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Long-lived handlers (the socket) open one short session per unit of work."""
    return SessionLocal


def init_db():
    from classhub import models  # noqa
    from classhub.db.base import Base

    Base.metadata.create_all(bind=engine)
