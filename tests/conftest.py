import os

# Settings are read at import time; keep tests off the real database
# and make argon2 cheap.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test_secret")
os.environ["PASSWORD_HASH_TIME_COST"] = "1"
os.environ["PASSWORD_HASH_MEMORY_COST"] = "1024"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from yoda_events.database import Base, get_db
from yoda_events.main import app
from yoda_events.models.event import Event
from yoda_events.models.users import User, utcnow
from yoda_events.utils.tokenJWT import create_access_token
from yoda_events.utils.user_listener import get_password_listener


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    get_password_listener().register()
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(username, password="secret123", roles=None, email=None):
        user = User(
            username=username,
            email=email or f"{username}@deathstar.com",
            roles=roles or [],
        )
        user.plain_password = password
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_event(db):
    def _make(owner, name="Darth's Birthday Party!", location="Deathstar", time=None, details=None):
        event = Event(
            name=name,
            location=location,
            time=time or utcnow() + timedelta(days=1),
            details=details,
            owner=owner,
        )
        db.add(event)
        db.commit()
        return event
    return _make


@pytest.fixture
def darth(make_user):
    return make_user("darth", "darthpass")


@pytest.fixture
def wayne(make_user):
    return make_user("wayne", "waynepass", roles=["ROLE_ADMIN"])


def auth_headers(user):
    token = create_access_token({"sub": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
