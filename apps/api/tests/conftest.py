"""
Test configuration and fixtures.

Provides:
- Fresh schema per test on an in-memory SQLite engine
- Organization / user / ticket / message fixtures
- Deterministic fake AI provider and knowledge index
- HTTPX AsyncClient with the internal secret header
"""
import os
import uuid
from typing import AsyncGenerator, Generator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

# Configure before any helpdesk import reads settings
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["INTERNAL_SECRET"] = "test-internal-secret"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ["KNOWLEDGE_INDEX_BACKEND"] = "scan"
os.environ["AI_PIPELINE_INLINE"] = "False"
os.environ["EMBEDDING_DIMENSIONS"] = "3"

from helpdesk.main import app
from helpdesk.core.deps import INTERNAL_SECRET_HEADER, get_db
from helpdesk.db.base import Base
from helpdesk.db.enums import TicketPriority, TicketStatus, UserRole
from helpdesk.db.models import Organization, SupportTeam, Ticket, TicketMessage, UserProfile
from helpdesk.db.session import SessionLocal, engine
from ai_fakes import FakeProvider

INTERNAL_SECRET = "test-internal-secret"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a database session on a freshly created schema.

    The engine uses a single shared in-memory connection, so sessions opened
    by app code (inline job runs) see the same data.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_org(db: Session) -> Organization:
    """Create a test organization."""
    org = Organization(
        id=uuid.uuid4(),
        name="Test Organization",
        slug=f"test-org-{uuid.uuid4().hex[:8]}",
        ai_enabled=True,
    )
    db.add(org)
    db.commit()
    return org


@pytest.fixture(scope="function")
def test_customer(db: Session, test_org: Organization) -> UserProfile:
    customer = UserProfile(
        id=uuid.uuid4(),
        organization_id=test_org.id,
        email=f"customer-{uuid.uuid4().hex[:8]}@test.com",
        display_name="Casey Customer",
        role=UserRole.CUSTOMER.value,
    )
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture(scope="function")
def test_agent(db: Session, test_org: Organization) -> UserProfile:
    agent = UserProfile(
        id=uuid.uuid4(),
        organization_id=test_org.id,
        email=f"agent-{uuid.uuid4().hex[:8]}@test.com",
        display_name="Alex Agent",
        role=UserRole.AGENT.value,
    )
    db.add(agent)
    db.commit()
    return agent


@pytest.fixture(scope="function")
def test_team(db: Session, test_org: Organization) -> SupportTeam:
    team = SupportTeam(id=uuid.uuid4(), organization_id=test_org.id, name="Tier 1")
    db.add(team)
    db.commit()
    return team


@pytest.fixture(scope="function")
def test_ticket(
    db: Session,
    test_org: Organization,
    test_customer: UserProfile,
    test_agent: UserProfile,
    test_team: SupportTeam,
) -> Ticket:
    ticket = Ticket(
        id=uuid.uuid4(),
        organization_id=test_org.id,
        title="Cannot log in",
        description="Password reset email never arrives",
        status=TicketStatus.OPEN.value,
        priority=TicketPriority.NORMAL.value,
        created_by_user_id=test_customer.id,
        assigned_to_user_id=test_agent.id,
        assigned_to_team_id=test_team.id,
        version=1,
    )
    db.add(ticket)
    db.commit()
    return ticket


@pytest.fixture(scope="function")
def test_customer_message(
    db: Session, test_ticket: Ticket, test_customer: UserProfile
) -> TicketMessage:
    message = TicketMessage(
        id=uuid.uuid4(),
        ticket_id=test_ticket.id,
        organization_id=test_ticket.organization_id,
        sender_user_id=test_customer.id,
        content="How do I reset my password?",
        attached_file_ids=[],
    )
    db.add(message)
    db.commit()
    return message


# =============================================================================
# AI fakes
# =============================================================================

@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient authenticated with the internal service secret."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={INTERNAL_SECRET_HEADER: INTERNAL_SECRET},
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def anonymous_client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient without the internal secret header."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
