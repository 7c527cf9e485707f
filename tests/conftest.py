"""Shared fixtures: an in-memory store and a scripted GitHub."""

from urllib.parse import unquote

import httpx
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import ghmirror.models  # noqa: F401  (registers tables on Base.metadata)
from ghmirror.core.db import Base
from ghmirror.core.rate_limiter import RateLimiter
from ghmirror.github_client import GitHubClient
from ghmirror.services.entity_store import EntityStore
from ghmirror.services.mirror import MirrorEngine

API_BASE = "https://api.github.test/"
API_BASE_V2 = "https://github.test/api/v2/json/"

SHA = "a" * 40

ALICE = {
    "login": "alice",
    "name": "Alice",
    "company": "ACME",
    "email": "alice@example.com",
    "hireable": True,
    "bio": None,
    "location": "Athens",
    "created_at": "2010-01-01T00:00:00Z",
}

PROJ = {
    "url": "https://api.github.test/repos/alice/proj",
    "name": "proj",
    "description": "Demo project",
    "language": "Python",
    "created_at": "2011/02/03 04:05:06 -0800",
}

COMMIT = {
    "sha": SHA,
    "commit": {
        "message": "Initial import",
        "author": {"name": "Bob", "email": "bob@example.com"},
        "committer": {"name": "Alice", "email": "alice@example.com"},
    },
    "author": {"login": "bob"},
    "committer": {"login": "alice"},
}

BOB_BY_EMAIL = {
    "user": {
        "login": "bob",
        "name": "Bob",
        "company": None,
        "email": "bob@example.com",
        "location": "Delft",
        "created_at": "2009/05/06 07:08:09 +0000",
    }
}


class FakeGitHub:
    """Serves canned JSON per URL path and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, payload=None, status=200, content=None):
        self.routes[path] = (status, payload, content)

    def calls(self, path) -> int:
        return self.requests.count(path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = unquote(request.url.path)
        self.requests.append(path)

        if path not in self.routes:
            return httpx.Response(404, json={"message": "Not Found"})

        status, payload, content = self.routes[path]
        if content is not None:
            return httpx.Response(status, content=content)
        return httpx.Response(status, json=payload)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session):
    return EntityStore(db_session)


@pytest.fixture
def fake_github():
    fake = FakeGitHub()
    fake.add("/users/alice", ALICE)
    fake.add("/repos/alice/proj", PROJ)
    fake.add(f"/repos/alice/proj/commits/{SHA}", COMMIT)
    fake.add("/api/v2/json/user/email/bob@example.com", BOB_BY_EMAIL)
    return fake


@pytest.fixture
def github(fake_github):
    http = httpx.Client(transport=httpx.MockTransport(fake_github.handler))
    client = GitHubClient(
        http,
        rate_limiter=RateLimiter(budget=1000),
        base_url=API_BASE,
        base_url_v2=API_BASE_V2,
    )
    yield client
    http.close()


@pytest.fixture
def mirror(store, github):
    return MirrorEngine(store, github)
