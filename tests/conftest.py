# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")

from syntrabook_stage.core.security import create_access_token
from syntrabook_stage.db.session import Base
from syntrabook_stage.db.session import get_db as app_get_session
from syntrabook_stage.db.time import utcnow
from syntrabook_stage.main import app as fastapi_app
from syntrabook_stage.models import Agent, Community, Post, Subscription

TEST_DB_URL = "sqlite://"

_AGENT_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit (the ban sweep once per agent), so tests run against
    # real transactions and the tables are emptied afterwards.
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_agent(db_session: Session) -> Callable[..., Agent]:
    """Return a factory persisting agents with unique usernames."""

    def _make_agent(username: str | None = None, **fields: object) -> Agent:
        agent = Agent(
            username=username or f"agent{next(_AGENT_COUNTER)}",
            display_name=fields.pop("display_name", None),
            **fields,
        )
        db_session.add(agent)
        db_session.commit()
        return agent

    return _make_agent


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory persisting posts with explicit counters and timestamps."""

    def _make_post(
        author: Agent,
        community: Community | None = None,
        title: str = "A post",
        content: str | None = "Body text",
        upvotes: int = 0,
        downvotes: int = 0,
        created_at: datetime | None = None,
    ) -> Post:
        post = Post(
            title=title,
            content=content,
            author_id=author.id,
            community_id=community.id if community else None,
            upvotes=upvotes,
            downvotes=downvotes,
            created_at=created_at or utcnow(),
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make_post


@pytest.fixture()
def test_agent(make_agent: Callable[..., Agent]) -> Agent:
    """Create and return the primary test agent."""
    return make_agent("tester", display_name="Test Agent")


@pytest.fixture()
def other_agent(make_agent: Callable[..., Agent]) -> Agent:
    """Create and return a second agent."""
    return make_agent("other", display_name="Other Agent")


@pytest.fixture()
def third_agent(make_agent: Callable[..., Agent]) -> Agent:
    """Create and return a third agent, usually a juror."""
    return make_agent("third", display_name="Third Agent")


def auth_headers(agent: Agent) -> dict[str, str]:
    token = create_access_token(agent.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[[Agent], dict[str, str]]:
    """Return a helper building bearer headers for any agent."""
    return auth_headers


@pytest.fixture()
def auth_token(test_agent: Agent) -> dict[str, str]:
    """Return authorization headers for the primary test agent."""
    return auth_headers(test_agent)


@pytest.fixture()
def other_auth_token(other_agent: Agent) -> dict[str, str]:
    """Return authorization headers for the secondary test agent."""
    return auth_headers(other_agent)


@pytest.fixture()
def third_auth_token(third_agent: Agent) -> dict[str, str]:
    return auth_headers(third_agent)


@pytest.fixture()
def community(db_session: Session, test_agent: Agent) -> Community:
    """Create a test community the primary agent is subscribed to."""
    community = Community(
        name="testing",
        description="Test community description",
        creator_id=test_agent.id,
        member_count=1,
    )
    db_session.add(community)
    db_session.flush()
    db_session.add(Subscription(agent_id=test_agent.id, community_id=community.id))
    db_session.commit()
    return community


@pytest.fixture()
def test_post(make_post: Callable[..., Post], test_agent: Agent, community: Community) -> Post:
    """Create a baseline post by the primary agent."""
    return make_post(test_agent, community, title="Test post", content="Test post content")
