import json
import os
from decimal import Decimal
from typing import Generator
from uuid import UUID, uuid4

# Settings are read at import time; point them at test values first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Text, TypeDecorator, create_engine, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from compass.auth.jwt import JWTPayload
from compass.auth.password import hash_password
from compass.db.base import Base
from compass.db.session import get_session
from compass.main import app
from compass.models.domain import Alternative, Criterion, Decision, Rating, User


# Test database setup
# Using SQLite for tests - need to handle PostgreSQL-specific types
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,  # Set to True for SQL debugging
)


@event.listens_for(engine, "connect", insert=True)
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enforce foreign keys so cascade bugs surface as IntegrityErrors."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class JSONBType(TypeDecorator):
    """JSONB stand-in that stores JSON text on SQLite."""

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return json.dumps(value) if not isinstance(value, str) else value

    def process_result_value(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return json.loads(value) if isinstance(value, str) else value


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    # Replace JSONB with JSONBType in metadata before creating tables
    jsonb_columns = {}
    for table in Base.metadata.tables.values():
        for column in table.columns:
            if isinstance(column.type, JSONB) and column not in jsonb_columns:
                jsonb_columns[column] = column.type
                column.type = JSONBType()

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        for column, original_type in jsonb_columns.items():
            column.type = original_type


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override."""
    def override_get_session():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


# Test data fixtures
def _make_user(db_session: Session, username: str, password: str = "secret123") -> User:
    user = User(id=uuid4(), username=username, password_hash=hash_password(password))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session: Session) -> User:
    """The user who owns the test decisions."""
    return _make_user(db_session, "alice")


@pytest.fixture
def other_user(db_session: Session) -> User:
    """A second user who owns nothing."""
    return _make_user(db_session, "bob")


@pytest.fixture
def empty_decision(db_session: Session, test_user: User) -> Decision:
    """A decision with no alternatives or criteria."""
    decision = Decision(id=uuid4(), user_id=test_user.id, title="Empty decision", description="")
    db_session.add(decision)
    db_session.commit()
    db_session.refresh(decision)
    return decision


@pytest.fixture
def test_decision(db_session: Session, test_user: User) -> Decision:
    """Decision with alternatives A, B and criteria C1 (weight 2), C2 (weight 1)."""
    decision = Decision(id=uuid4(), user_id=test_user.id, title="Pick a laptop", description="Work machine")
    decision.alternatives = [
        Alternative(id=uuid4(), name="A", position=0, score=Decimal("0")),
        Alternative(id=uuid4(), name="B", position=1, score=Decimal("0")),
    ]
    decision.criteria = [
        Criterion(id=uuid4(), name="C1", weight=Decimal("2"), position=0),
        Criterion(id=uuid4(), name="C2", weight=Decimal("1"), position=1),
    ]
    db_session.add(decision)
    db_session.commit()
    db_session.refresh(decision)
    return decision


@pytest.fixture
def rate(db_session: Session):
    """Return a function that stores a rating directly in the database."""
    def _rate(user: User, decision: Decision, alternative_name: str, criterion_name: str, value) -> Rating:
        alternative = next(a for a in decision.alternatives if a.name == alternative_name)
        criterion = next(c for c in decision.criteria if c.name == criterion_name)
        rating = Rating(
            id=uuid4(),
            user_id=user.id,
            decision_id=decision.id,
            alternative_id=alternative.id,
            criterion_id=criterion.id,
            value=Decimal(str(value)),
        )
        db_session.add(rating)
        db_session.commit()
        return rating
    return _rate


def create_jwt_token(user_id: UUID, username: str) -> str:
    """Create a JWT token for testing."""
    return JWTPayload.create_token(user_id, username)


@pytest.fixture
def get_auth_headers():
    """Fixture that returns a function to get auth headers for a user."""
    def _get_auth_headers(user: User) -> dict:
        token = create_jwt_token(user.id, user.username)
        return {"Authorization": f"Bearer {token}"}
    return _get_auth_headers
