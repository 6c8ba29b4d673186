"""Shared fixtures."""

import os


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_REQUESTS", "false")

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeSession


SERVICE_NAMES = (
    "user_service",
    "membership_service",
    "author_service",
    "gallery_service",
    "tag_service",
    "search_service",
    "quote_service",
    "comment_service",
    "email_service",
    "notification_dispatcher",
    "notification_service",
)


@pytest.fixture
def session() -> FakeSession:
    """Fake Cassandra session routing statements by CQL text."""
    return FakeSession()


@pytest.fixture
def app():
    """Application with every service replaced by an ``AsyncMock``.

    The lifespan is not entered, so nothing connects to Cassandra or Redis.
    """
    from gulfquotes.main import app as application

    for name in SERVICE_NAMES:
        setattr(application.state, name, AsyncMock())
    application.state.cassandra_session = None
    yield application
    for name in (*SERVICE_NAMES, "cassandra_session"):
        if hasattr(application.state, name):
            delattr(application.state, name)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    yield TestClient(app, raise_server_exceptions=False)
