from __future__ import annotations

import os

# Settings are read at import time: provide the required values before importing orchard.
os.environ.setdefault("PROJECT_NAME", "orchard-test")
os.environ.setdefault("POSTGRES_SERVER", "localhost")
os.environ.setdefault("POSTGRES_USER", "postgres")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SITE_URL", "http://localhost:3000")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("OSS_ENDPOINT", "oss-cn-hangzhou.aliyuncs.com")
os.environ.setdefault("OSS_BUCKET", "orchard-test")
os.environ.setdefault("OSS_ACCESS_KEY_ID", "test-access-key-id")
os.environ.setdefault("OSS_ACCESS_KEY_SECRET", "test-access-key-secret")

from collections.abc import Callable, Generator  # noqa: E402
from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine, delete  # noqa: E402

from orchard import crud  # noqa: E402
from orchard.api.deps import get_db  # noqa: E402
from orchard.core import security  # noqa: E402
from orchard.enums import AccountType  # noqa: E402
from orchard.main import app  # noqa: E402
from orchard.models import (  # noqa: E402
    AppleGift,
    AppleRedemption,
    Follower,
    Like,
    Post,
    Profile,
    StripeEvent,
    Subscription,
    Transaction,
)


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
        # Clean tables after each test (children first).
        session.rollback()
        for model in (
            StripeEvent,
            Like,
            Follower,
            AppleRedemption,
            AppleGift,
            Transaction,
            Subscription,
            Post,
            Profile,
        ):
            session.exec(delete(model))
        session.commit()


@pytest.fixture(scope="function")
def client(engine, db) -> Generator[TestClient, None, None]:
    def _override_get_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db) -> Callable[..., Profile]:
    """Create a profile directly in the database, optionally with an account type."""

    def _make(
        email: str,
        *,
        username: str | None = None,
        account_type: AccountType | None = AccountType.fan,
        password: str = "password123",
        **fields,
    ) -> Profile:
        profile = crud.create_profile(
            session=db, email=email, password=password, username=username
        )
        profile.account_type = account_type
        for key, value in fields.items():
            setattr(profile, key, value)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def auth_headers() -> Callable[[Profile], dict[str, str]]:
    def _headers(profile: Profile) -> dict[str, str]:
        token = security.create_access_token(profile.id, expires_delta=timedelta(minutes=30))
        return {"Authorization": f"Bearer {token}"}

    return _headers
