import os
# Override settings before any app imports so tests never need Postgres, Redis or Resend
os.environ["DATABASE_URL"] = "sqlite:///./test_invites.db"
os.environ["DISABLE_CELERY"] = "true"
os.environ["RESEND_API_KEY"] = ""
os.environ["INVITE_DELIVERY_POLICY"] = "after_commit"

import uuid
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from invitation.platform.database import Base, enable_sqlite_savepoints, get_db
from invitation.main import app
from invitation.models import Invite, Organization, User

SQLALCHEMY_DATABASE_URL = "sqlite:///./test_invites.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
enable_sqlite_savepoints(engine)
# Helpers below commit through the fixture session; keeping loaded state after
# commit stops that session from holding a SQLite read lock while the API writes.
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

# Enable foreign key support for SQLite
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factory helpers: create test entities quickly and consistently
# ---------------------------------------------------------------------------

_counter = 0

def _unique_id() -> str:
    global _counter
    _counter += 1
    return f"{_counter}-{uuid.uuid4().hex[:8]}"


def create_user(db, email=None, full_name="Test User", organization=None) -> User:
    user = User(email=email or f"user-{_unique_id()}@example.com", full_name=full_name)
    if organization is not None:
        user.organizations.append(organization)
    db.add(user)
    db.commit()
    return user


def create_organization(db, name=None) -> Organization:
    uid = _unique_id()
    org = Organization(name=name or f"Org {uid}", slug=f"org-{uid}")
    db.add(org)
    db.commit()
    return org


def build_invite(organization, email=None, recipient=None, sender=None) -> Invite:
    """Unsaved invite; pass ``recipient`` to make it an existing-user invite."""
    if email is None:
        email = recipient.email if recipient is not None else f"new-{_unique_id()}@example.com"
    return Invite(email=email, invitable=organization, recipient=recipient, sender=sender)
