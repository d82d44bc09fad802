# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import HTTPException, Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auth.deps import get_current_user
from db.database import Base, enable_sqlite_foreign_keys, get_db
from main import app
from routers.tasks import get_attachment_store
from services.attachment_store import AttachmentStore
from services.task_service import TaskService

TEST_USER_HEADER = "X-Test-User"


@pytest.fixture()
def engine():
    """
    In-memory SQLite shared by every session in a test.

    StaticPool keeps a single connection so the schema survives across
    sessions and across the TestClient's worker threads.
    """
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(eng)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def upload_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture()
def store(upload_root: Path) -> AttachmentStore:
    return AttachmentStore(upload_root)


@pytest.fixture()
def service(db: Session, store: AttachmentStore) -> TaskService:
    return TaskService(db, store, enforce_due_date_not_past=True, purge_attachments_on_delete=False)


def _current_user_from_header(request: Request) -> str:
    user_id = request.headers.get(TEST_USER_HEADER)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user_id


@pytest.fixture()
def client(session_factory, store: AttachmentStore):
    """
    TestClient with the database, attachment store and principal resolver
    swapped out. The caller identity comes from the X-Test-User header.
    """

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = _current_user_from_header
    app.dependency_overrides[get_attachment_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
