# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Shared pytest fixtures for testing."""

import pytest
from httpx import ASGITransport, AsyncClient

from featurizer.api.limiter import limiter
from featurizer.config import clear_settings_cache
from featurizer.diagnostics import DiagnosticEvent
from featurizer.main import create_app
from featurizer.services.feature_service import FeatureService
from featurizer.stores.backends import DatabaseBackend, MemoryBackend
from featurizer.stores.memory import InMemoryCatalogStore, InMemoryTenantStore


class RecordingSink:
    """Diagnostic sink collecting events for assertions."""

    def __init__(self):
        self.events: list[DiagnosticEvent] = []

    def __call__(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    @property
    def codes(self) -> list[str]:
        return [event.code for event in self.events]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Memory backend and no kill switch unless a test says otherwise."""
    monkeypatch.setenv("FEATURIZER_STORE_BACKEND", "memory")
    monkeypatch.setenv("FEATURIZER_LOG_FORMAT", "text")
    monkeypatch.delenv("FEATURIZER_KILL_SWITCH", raising=False)
    monkeypatch.delenv("FEATURIZER_KILL_SWITCH_VENDORS", raising=False)
    monkeypatch.delenv("FEATURIZER_CATALOG_MANIFEST", raising=False)
    monkeypatch.delenv("FEATURIZER_DB_URL", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def disable_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def diagnostics() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def catalog() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture
def tenant() -> InMemoryTenantStore:
    return InMemoryTenantStore("acme-site")


@pytest.fixture
def service(catalog, diagnostics) -> FeatureService:
    return FeatureService(catalog, diagnostics=diagnostics)


@pytest.fixture
async def login_group(service):
    """hiveit/login with two registered features."""
    await service.register("hiveit", "login", "sso")
    await service.register("hiveit", "login", "two_factor")
    return service


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'featurizer.db'}"


@pytest.fixture
async def db_backend(sqlite_url):
    """Database backend over a fresh SQLite file."""
    backend = DatabaseBackend(sqlite_url)
    await backend.create_schema()
    yield backend
    await backend.shutdown()


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
async def client(memory_backend):
    """Async test client bound to an in-memory backend."""
    app = create_app()
    app.state.backend = memory_backend
    app.state.override = None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_features():
    return [
        {"vendor": "hiveit", "group": "login", "feature": "sso"},
        {"vendor": "hiveit", "group": "login", "feature": "two_factor"},
        {"vendor": "hiveit", "group": "portfolio", "feature": "gallery"},
    ]
