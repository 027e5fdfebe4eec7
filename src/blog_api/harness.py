"""Fixture generation, seeding and teardown for integration tests.

Payloads are generated through a pluggable ``PostGenerator``. The default
``FakerPostGenerator`` is seeded per instance so a run is reproducible.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import structlog
from faker import Faker

from blog_api.models import AuthorName, BlogPost
from blog_api.store import PostStore

log = structlog.get_logger()

DEFAULT_SEED = 1234
DEFAULT_SEED_COUNT = 10


@runtime_checkable
class PostGenerator(Protocol):
    """Produces one request payload: ``{title, content, author: {firstName, lastName}}``."""

    def generate(self) -> dict[str, Any]: ...


class FakerPostGenerator:
    """Random words for the title, a random paragraph for content, a random name."""

    def __init__(self, seed: int = DEFAULT_SEED, locale: str = "en_US") -> None:
        self._faker = Faker(locale)
        self._faker.seed_instance(seed)

    def generate(self) -> dict[str, Any]:
        return {
            "title": " ".join(self._faker.words()),
            "content": self._faker.paragraph(),
            "author": {
                "firstName": self._faker.first_name(),
                "lastName": self._faker.last_name(),
            },
        }


# Shared by every default call; seeded once per process
_default_generator = FakerPostGenerator()


def generate(generator: PostGenerator | None = None) -> dict[str, Any]:
    """One synthetic payload (no ``id``/``created``) for use as a request body."""
    return (generator or _default_generator).generate()


def to_post(payload: dict[str, Any]) -> BlogPost:
    return BlogPost(
        title=payload["title"],
        content=payload["content"],
        author=AuthorName.model_validate(payload["author"]),
    )


async def seed(
    store: PostStore,
    n: int = DEFAULT_SEED_COUNT,
    generator: PostGenerator | None = None,
) -> list[BlogPost]:
    """Generate *n* posts and bulk-insert them. Insertion errors propagate."""
    if n < 0:
        raise ValueError(f"seed count must be non-negative, got {n}")
    gen = generator or _default_generator
    await log.ainfo("seeding_blog_data", count=n)
    return await store.insert_many(to_post(gen.generate()) for _ in range(n))


async def teardown(store: PostStore) -> None:
    """Irrecoverably drop every post in *store*. Failures propagate; no retry."""
    await log.awarning("deleting_database")
    await store.drop()
