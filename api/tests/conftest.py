"""Shared fixtures for oikos-api tests."""

import re

import pytest
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError

from api.services.record_store import (
    BLOG_INDEXES,
    PROJECT_INDEXES,
    RecordStore,
    new_blog_id,
)

TEST_ADMIN = "admin"
TEST_PASSWORD = "correct horse battery staple"


# -- in-memory stand-in for azure.storage.blob.ContainerClient --------------


class _BlobItem:
    def __init__(self, name):
        self.name = name


class _Download:
    def __init__(self, data):
        self._data = data

    def readall(self):
        return self._data


class _BlobClient:
    def __init__(self, container, name):
        self._container = container
        self.name = name

    def upload_blob(self, data, overwrite=False, content_settings=None, tags=None):
        self._container.check_exists()
        if not overwrite and self.name in self._container.blobs:
            raise ResourceExistsError("BlobAlreadyExists")
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._container.blobs[self.name] = data
        self._container.tags[self.name] = dict(tags or {})

    def download_blob(self):
        if self.name not in self._container.blobs:
            raise ResourceNotFoundError("BlobNotFound")
        return _Download(self._container.blobs[self.name])

    def delete_blob(self):
        if self.name not in self._container.blobs:
            raise ResourceNotFoundError("BlobNotFound")
        del self._container.blobs[self.name]
        self._container.tags.pop(self.name, None)


class _PageIterator:
    """Mimics azure.core.paging page iteration with offset-based tokens."""

    def __init__(self, names, per_page, token):
        self._names = names
        self._per_page = per_page or max(len(names), 1)
        self._start = int(token) if token else 0
        self._exhausted = False
        self.continuation_token = token

    def __iter__(self):
        return self

    def __next__(self):
        if self._exhausted:
            raise StopIteration
        end = self._start + self._per_page
        page = [_BlobItem(n) for n in self._names[self._start : end]]
        if end < len(self._names):
            self.continuation_token = str(end)
            self._start = end
        else:
            self.continuation_token = None
            self._exhausted = True
        return iter(page)


class _Pager:
    def __init__(self, names, per_page):
        self._names = names
        self._per_page = per_page

    def __iter__(self):
        return iter(_BlobItem(n) for n in self._names)

    def by_page(self, continuation_token=None):
        return _PageIterator(self._names, self._per_page, continuation_token)


class FakeContainerClient:
    """Blob container kept in memory; blob names are listed in sorted order."""

    _TAG_CLAUSE_RE = re.compile(r"\"(\w+)\" = '([^']*)'")

    def __init__(self, exists=True):
        self.exists = exists
        self.blobs: dict[str, bytes] = {}
        self.tags: dict[str, dict[str, str]] = {}

    def check_exists(self):
        if not self.exists:
            raise ResourceNotFoundError("ContainerNotFound")

    def create_container(self):
        if self.exists:
            raise ResourceExistsError("ContainerAlreadyExists")
        self.exists = True

    def get_blob_client(self, name):
        return _BlobClient(self, name)

    def list_blobs(self, results_per_page=None):
        self.check_exists()
        return _Pager(sorted(self.blobs), results_per_page)

    def find_blobs_by_tags(self, filter_expression, results_per_page=None):
        self.check_exists()
        wanted = dict(self._TAG_CLAUSE_RE.findall(filter_expression))
        names = sorted(
            name
            for name in self.blobs
            if all(self.tags.get(name, {}).get(k) == v for k, v in wanted.items())
        )
        return _Pager(names, results_per_page)


# -- fixtures ------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from api.config import get_settings

    get_settings.cache_clear()

    # 2. Record store singletons
    import api.services.record_store as store_mod

    store_mod._blog_store = None
    store_mod._project_store = None

    # 3. Health check cache
    import api.main as main_mod

    main_mod._health_cache = None


@pytest.fixture
def mock_settings(monkeypatch):
    """Provide a Settings object with safe test defaults."""
    from api.config import Settings, get_settings
    from api.services.auth import hash_password

    test_settings = Settings(
        azure_storage_account="teststorage",
        azure_blog_container="test-blogs",
        azure_project_container="test-projects",
        managed_identity_client_id="test-client-id",
        admin_users={TEST_ADMIN: hash_password(TEST_PASSWORD, iterations=1000)},
        session_secret="test-session-secret-with-at-least-32-bytes",
        session_ttl_minutes=30,
    )

    get_settings.cache_clear()
    monkeypatch.setattr("api.config.get_settings", lambda: test_settings)

    # Patch get_settings in all modules that import it directly
    # (from api.config import get_settings creates a local binding that
    # the api.config monkeypatch above does not affect)
    for mod_path in [
        "api.services.record_store",
        "api.services.auth",
        "api.main",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


@pytest.fixture
def blog_container(monkeypatch):
    """In-memory container installed as the blog store."""
    container = FakeContainerClient()
    monkeypatch.setattr(
        "api.services.record_store._blog_store",
        RecordStore(
            container,
            kind="blog post",
            indexed_fields=BLOG_INDEXES,
            id_factory=new_blog_id,
        ),
    )
    return container


@pytest.fixture
def project_container(monkeypatch):
    """In-memory container installed as the project store."""
    container = FakeContainerClient()
    monkeypatch.setattr(
        "api.services.record_store._project_store",
        RecordStore(container, kind="project", indexed_fields=PROJECT_INDEXES),
    )
    return container


@pytest.fixture
def admin_headers(mock_settings):
    """Authorization header carrying a valid admin session token."""
    from api.models.auth import AdminUser
    from api.services.auth import issue_token

    token = issue_token(AdminUser(username=TEST_ADMIN))
    return {"Authorization": f"Bearer {token.access_token}"}


@pytest.fixture
async def client(mock_settings):
    """HTTP client bound to the ASGI app."""
    from httpx import ASGITransport, AsyncClient

    from api.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client


@pytest.fixture
def admin_credentials(mock_settings):
    """Username and password accepted by ``mock_settings``."""
    return {"username": TEST_ADMIN, "password": TEST_PASSWORD}
