from collections.abc import Generator
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from affiliate_coupons.core.config import settings


def create_db_engine(dsn: str, **kwargs: Any) -> Engine:
    """Create an engine for ``dsn``; SQLite connections may be shared across threads."""
    connect_args = {"check_same_thread": False} if dsn.startswith("sqlite") else {}
    return create_engine(dsn, connect_args=connect_args, echo=settings.DEBUG, **kwargs)


engine = create_db_engine(settings.APP_DATABASE_DSN)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the coupon, affiliate, referral and integration tables."""
    import affiliate_coupons.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
