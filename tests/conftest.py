from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from src.api.deps import get_registry, get_summarizer
from src.api.main import app
from src.core.auth import create_access_token
from src.domain.services.registry import AssessmentRegistry
from src.infrastructure.cache import LocalCache
from src.infrastructure.db.base import Base
from src.infrastructure.repositories.assessment_store import SqlAssessmentStore

from tests.utils import make_record


@pytest.fixture()
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "metabev-assessments-v2.json"


@pytest.fixture()
def local_cache(cache_path: Path) -> LocalCache:
    return LocalCache(cache_path)


@pytest.fixture()
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """In-memory SQLite standing in for the hosted assessments table."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
def store(session_factory: async_sessionmaker[AsyncSession]) -> SqlAssessmentStore:
    return SqlAssessmentStore(session_factory)


@pytest.fixture()
def registry(local_cache: LocalCache, store: SqlAssessmentStore) -> AssessmentRegistry:
    return AssessmentRegistry(local_cache, store)


@pytest.fixture()
async def seeded_registry(registry: AssessmentRegistry) -> AssessmentRegistry:
    """Two employees under Mark, one under Mary; Mary has a per-record password."""
    await registry.commit(
        [
            make_record("Jane Doe", "jane@example.com"),
            make_record("John Roe", "John@Example.com"),
            make_record(
                "Ann Lee",
                "ann@example.com",
                manager_name="Mary Boss",
                manager_email="mary@example.com",
                manager_password="s3cret",
            ),
        ]
    )
    return registry


@pytest.fixture()
async def async_client(seeded_registry: AssessmentRegistry) -> AsyncIterator[AsyncClient]:
    """Async HTTP client over the app with the seeded registry injected."""
    app.dependency_overrides[get_registry] = lambda: seeded_registry
    app.dependency_overrides[get_summarizer] = lambda: None
    transport = ASGITransport(app=app)  # type: ignore
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_registry, None)
    app.dependency_overrides.pop(get_summarizer, None)


@pytest.fixture()
def manager_token() -> str:
    return create_access_token("mark@example.com", roles=["manager"])

