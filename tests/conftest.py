"""Shared test constants, fixtures, and factory functions."""

import os
from collections.abc import AsyncIterator
from typing import Any

import fakeredis
import pytest
from httpx import ASGITransport, AsyncClient

from blog_api.config import Settings
from blog_api.harness import FakerPostGenerator, seed, teardown
from blog_api.main import app
from blog_api.models import AuthorName, BlogPost
from blog_api.posts import get_store
from blog_api.redis_store import RedisPostStore
from blog_api.store import PostStore

# -- Constants --

# Points at a disposable Redis; every key under TEST_KEY_PREFIX is dropped after each test.
TEST_REDIS_URL = os.environ.get("TEST_REDIS_URL")
TEST_KEY_PREFIX = "blog-test:"

SEED_COUNT = 10
GENERATOR_SEED = 42

VIEW_KEYS = {"id", "author", "title", "content", "created"}

UPDATE_DATA: dict[str, str] = {
    "title": "fofofofofofofof",
    "content": "futuristic fusion",
}


# -- Factories --


def make_settings(**overrides: Any) -> Settings:
    """Create a Settings instance with test defaults. Override any field."""
    defaults: dict[str, Any] = {"store_backend": "memory"}
    return Settings(**(defaults | overrides))


def make_post(
    title: str = "Hello",
    content: str = "World",
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    **overrides: Any,
) -> BlogPost:
    """Create a BlogPost document. Override id or created via kwargs."""
    return BlogPost(
        title=title,
        content=content,
        author=AuthorName(first_name=first_name, last_name=last_name),
        **overrides,
    )


def make_fake_redis() -> fakeredis.FakeAsyncRedis:
    """Isolated fake Redis client backed by its own server."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())


# -- Fixtures --


@pytest.fixture
def generator() -> FakerPostGenerator:
    """Deterministically seeded payload generator."""
    return FakerPostGenerator(seed=GENERATOR_SEED)


@pytest.fixture
async def store() -> AsyncIterator[PostStore]:
    """Fresh Redis-backed store per test; dropped afterwards.

    Uses the disposable instance at TEST_REDIS_URL when set, fakeredis otherwise.
    """
    if TEST_REDIS_URL:
        from redis.asyncio import Redis

        client = Redis.from_url(TEST_REDIS_URL)
    else:
        client = make_fake_redis()
    post_store = RedisPostStore(client, key_prefix=TEST_KEY_PREFIX)
    yield post_store
    await teardown(post_store)
    await post_store.aclose()


@pytest.fixture
async def seeded(store: PostStore, generator: FakerPostGenerator) -> list[BlogPost]:
    """Seed SEED_COUNT synthetic posts before the test."""
    return await seed(store, SEED_COUNT, generator)


@pytest.fixture
async def client(store: PostStore) -> AsyncIterator[AsyncClient]:
    """AsyncClient wired to the FastAPI app with the test store injected."""
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear service env vars so Settings falls back to defaults."""
    for name in (
        "STORE_BACKEND",
        "REDIS_URL",
        "STORE_KEY_PREFIX",
        "PORT",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)
