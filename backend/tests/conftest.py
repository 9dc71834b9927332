"""Shared test fixtures for all test modules."""

import contextlib

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import affiliate_coupons.models  # noqa: F401
from affiliate_coupons.core import cache as cache_module
from affiliate_coupons.core import database as db_module
from affiliate_coupons.core.cache import MemoryCacheStore, VersionedCache
from affiliate_coupons.core.database import Base, create_db_engine
from affiliate_coupons.core.hooks import HookRegistry, default_hooks
from affiliate_coupons.models.referral import ReferralStatus
from affiliate_coupons.repositories.affiliate_repository import AffiliateRepository
from affiliate_coupons.repositories.coupon_repository import CouponRepository
from affiliate_coupons.repositories.referral_repository import ReferralRepository

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_db_engine("sqlite://", poolclass=StaticPool)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Also resets the process-wide cache
    store and default hooks.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)
    cache_module.reset_cache_store()

    yield

    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    cache_module.reset_cache_store()
    default_hooks.remove_all()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = db_module.get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def cache():
    """A versioned cache over a fresh in-memory store."""
    return VersionedCache(MemoryCacheStore(), ttl=3600)


@pytest.fixture
def hooks():
    return HookRegistry()


@pytest.fixture
def coupon_repo(db_session, cache, hooks):
    return CouponRepository(db_session, cache=cache, hooks=hooks, acting_user_id=7)


@pytest.fixture
def affiliate_repo(db_session):
    return AffiliateRepository(db_session)


@pytest.fixture
def referral_repo(db_session):
    return ReferralRepository(db_session)


@pytest.fixture
def affiliate(affiliate_repo):
    return affiliate_repo.create(user_id=101)


@pytest.fixture
def other_affiliate(affiliate_repo):
    return affiliate_repo.create(user_id=202)


@pytest.fixture
def referral(referral_repo, affiliate):
    """A paid referral owned by ``affiliate``."""
    return referral_repo.create(affiliate.id, status=ReferralStatus.PAID)


@pytest.fixture
def foreign_referral(referral_repo, other_affiliate):
    """A paid referral owned by ``other_affiliate``."""
    return referral_repo.create(other_affiliate.id, status=ReferralStatus.PAID)
