# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("RANKING_SWEEP_ENABLED", "false")

from sphere_stage.core.security import create_access_token
from sphere_stage.db.session import Base
from sphere_stage.db.session import get_db as app_get_session
from sphere_stage.main import app as fastapi_app
from sphere_stage.models import Comment, Post, Sphere, SphereModerator, User

TEST_DB_URL = "sqlite://"
FIXED_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)

_USERNAME_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Let SQLAlchemy drive BEGIN/SAVEPOINT instead of the sqlite3 module.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # commit()/rollback() inside the code under test only touch a savepoint.
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits escaped.
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
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW for deterministic timestamps."""
    return lambda: FIXED_NOW


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with unique names."""

    def _make_user(username: str | None = None, *, is_admin: bool = False) -> User:
        user = User(
            username=username or f"user{next(_USERNAME_COUNTER)}",
            is_admin=is_admin,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second user, the author of ``test_post``."""
    return make_user("bob")


@pytest.fixture()
def moderator_user(make_user: Callable[..., User]) -> User:
    """Create the creator and moderator of ``sphere``."""
    return make_user("mod")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    """Create a platform-wide administrator."""
    return make_user("admin", is_admin=True)


def _bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return _bearer(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return _bearer(other_user)


@pytest.fixture()
def moderator_auth_token(moderator_user: User) -> dict[str, str]:
    """Return authorization headers for the sphere moderator."""
    return _bearer(moderator_user)


@pytest.fixture()
def sphere(db_session: Session, moderator_user: User) -> Sphere:
    """Create a sphere moderated by ``moderator_user``."""
    sphere = Sphere(
        slug="gardening",
        display_name="Gardening",
        description_md="Plants and soil",
        creator_id=moderator_user.id,
    )
    db_session.add(sphere)
    db_session.commit()
    db_session.add(SphereModerator(sphere_id=sphere.id, user_id=moderator_user.id))
    db_session.commit()
    return sphere


@pytest.fixture()
def make_post(db_session: Session, sphere: Sphere, other_user: User) -> Callable[..., Post]:
    """Return a factory for posts with explicit counters and timestamps."""

    def _make_post(
        *,
        score: int = 0,
        created: datetime = FIXED_NOW,
        creator: User | None = None,
        **fields,
    ) -> Post:
        post = Post(
            sphere_id=fields.pop("sphere_id", sphere.id),
            creator_id=(creator or other_user).id,
            title=fields.pop("title", "Tomatoes in March"),
            body=fields.pop("body", "Is it too early?"),
            score=score,
            score_minus=fields.pop("score_minus", 0),
            create_timestamp=created,
            scoring_timestamp=fields.pop("scoring_timestamp", created),
            **fields,
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make_post


@pytest.fixture()
def test_post(make_post: Callable[..., Post]) -> Post:
    """Create a baseline post with no votes."""
    return make_post()


@pytest.fixture()
def make_comment(db_session: Session, test_post: Post, other_user: User) -> Callable[..., Comment]:
    """Return a factory for comments on ``test_post``."""

    def _make_comment(
        *,
        parent: Comment | None = None,
        score: int = 0,
        created: datetime = FIXED_NOW,
        creator: User | None = None,
        **fields,
    ) -> Comment:
        comment = Comment(
            post_id=fields.pop("post_id", test_post.id),
            parent_id=parent.id if parent is not None else None,
            creator_id=(creator or other_user).id,
            body=fields.pop("body", "Reply"),
            score=score,
            score_minus=fields.pop("score_minus", 0),
            create_timestamp=created,
            **fields,
        )
        db_session.add(comment)
        db_session.commit()
        return comment

    return _make_comment
