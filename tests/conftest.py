"""Shared fixtures: in-memory database, fake collaborators, users and an API client"""

import asyncio
import os
import sys
from pathlib import Path

from cryptography.fernet import Fernet

# Configure the app before anything under app/ is imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-bearer-tokens")
os.environ.setdefault("VAULT_ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")
os.environ.setdefault("SECURITY_HEADERS_ENABLED", "true")

# Ensure the project root is on sys.path so `import app.*` works in tests.
PROJECT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_DIR))

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth import Principal, create_access_token  # noqa: E402
from app.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.domain.lifecycle.orchestrator import LifecycleOrchestrator  # noqa: E402
from app.domain.lifecycle.states import AccountStatus, Role  # noqa: E402
from app.models import ClientProfile, ServiceCategory, User  # noqa: E402


class FakeDocumentGenerator:
    """Document generator double; set fail=True to simulate a rendering error"""

    def __init__(self):
        self.fail = False
        self.delay = 0.0
        self.calls = []

    async def generate(self, proposal_id, client_label, items, total_amount):
        self.calls.append(
            {
                "proposal_id": proposal_id,
                "client_label": client_label,
                "items": items,
                "total_amount": total_amount,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("renderer crashed")
        return f"uploads/proposals/proposal-{proposal_id}.pdf"


class FakeNotifier:
    """Notification gateway double; set fail=True to simulate a mail outage"""

    def __init__(self):
        self.fail = False
        self.delay = 0.0
        self.proposal_emails = []
        self.approval_emails = []

    async def send_proposal_notification(
        self,
        client_email,
        client_name,
        agent_email,
        agent_name,
        artifact_reference,
        proposal_id,
        total_amount=None,
    ):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.proposal_emails.append(
            {
                "client_email": client_email,
                "client_name": client_name,
                "agent_email": agent_email,
                "agent_name": agent_name,
                "artifact_reference": artifact_reference,
                "proposal_id": proposal_id,
                "total_amount": total_amount,
            }
        )
        return {"id": f"fake-{proposal_id}"}

    async def send_account_approval_notification(self, email, name):
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.approval_emails.append({"email": email, "name": name})
        return {"id": f"fake-approval-{email}"}


class Factory:
    """Creates committed rows for tests"""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def user(self, role=Role.CLIENT, status=AccountStatus.ACTIVE, user_id=None, full_name=None, email=None):
        n = self._next()
        user = User(
            id=user_id,
            full_name=full_name or f"{role.value} User {n}",
            email=email or f"{role.value.lower()}{n}@example.com",
            role=role.value,
            status=status.value,
            is_email_verified=status != AccountStatus.UNVERIFIED,
        )
        self.db.add(user)
        self.db.commit()
        return user

    def client(self, company_name="Acme Corp", **kwargs):
        user = self.user(role=Role.CLIENT, **kwargs)
        profile = ClientProfile(user_id=user.id, company_name=company_name, industry="Retail")
        self.db.add(profile)
        self.db.commit()
        return user, profile

    def agent(self, **kwargs):
        return self.user(role=Role.AGENT, **kwargs)

    def admin(self, **kwargs):
        return self.user(role=Role.ADMIN, **kwargs)

    def category(self, name="Web Development"):
        category = ServiceCategory(name=name, description=f"{name} services")
        self.db.add(category)
        self.db.commit()
        return category

    @staticmethod
    def principal(user, profile=None) -> Principal:
        return Principal(
            id=user.id,
            role=Role.parse(user.role),
            email=user.email,
            full_name=user.full_name,
            client_id=profile.id if profile else None,
        )

    @staticmethod
    def headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed database, one connection each, for concurrency tests"""
    engine = create_engine(
        f"sqlite:///{(tmp_path / 'lifecycle.db').as_posix()}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def file_world(file_session_factory):
    """The world fixture's agent, client and category, committed to the file-backed database"""
    session = file_session_factory()
    factory = Factory(session)
    agent = factory.agent(full_name="Gary Agent")
    client_user, profile = factory.client(full_name="Carla Client", company_name="Acme Corp")
    category = factory.category()
    yield {
        "session": session,
        "agent": agent,
        "profile": profile,
        "category": category,
        "agent_principal": factory.principal(agent),
        "client_principal": factory.principal(client_user, profile),
    }
    session.close()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def factory(db_session):
    return Factory(db_session)


@pytest.fixture
def document_generator():
    return FakeDocumentGenerator()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def orchestrator(db_session, document_generator, notifier):
    return LifecycleOrchestrator(
        db_session,
        document_generator=document_generator,
        notifier=notifier,
        document_timeout=1,
        notification_timeout=1,
    )


@pytest.fixture
def world(factory):
    """Admin, an active agent, a client with a profile and one category"""
    admin = factory.admin(full_name="Alice Admin")
    agent = factory.agent(full_name="Gary Agent")
    client_user, profile = factory.client(full_name="Carla Client", company_name="Acme Corp")
    category = factory.category()
    return {
        "admin": admin,
        "agent": agent,
        "client_user": client_user,
        "profile": profile,
        "category": category,
        "admin_principal": factory.principal(admin),
        "agent_principal": factory.principal(agent),
        "client_principal": factory.principal(client_user, profile),
    }


@pytest.fixture
def api_client(db_session, document_generator, notifier):
    from fastapi.testclient import TestClient

    from app.domain.lifecycle.dependencies import get_document_generator, get_notifier
    from app.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_generator] = lambda: document_generator
    app.dependency_overrides[get_notifier] = lambda: notifier

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
