"""Document store protocol and the in-memory backend."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

import structlog

from blog_api.models import BlogPost

log = structlog.get_logger()

UPDATABLE_FIELDS = frozenset({"title", "content"})


@runtime_checkable
class PostStore(Protocol):
    """Protocol for blog post document stores."""

    async def insert(self, post: BlogPost) -> BlogPost: ...
    async def insert_many(self, posts: Iterable[BlogPost]) -> list[BlogPost]: ...
    async def get(self, post_id: str) -> BlogPost | None: ...
    async def find_one(self) -> BlogPost | None: ...
    async def find_all(self) -> list[BlogPost]: ...
    async def count(self) -> int: ...
    async def update(self, post_id: str, fields: Mapping[str, str]) -> BlogPost | None: ...
    async def delete(self, post_id: str) -> bool: ...
    async def drop(self) -> None: ...

    async def aclose(self) -> None: ...


def apply_update(post: BlogPost, fields: Mapping[str, str]) -> BlogPost:
    """Return a copy of *post* with only the updatable keys of *fields* applied."""
    changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
    return post.model_copy(update=changes)


class MemoryPostStore:
    """In-memory post store for local runs and testing.

    Posts are kept in insertion order. Implements PostStore protocol.
    """

    def __init__(self) -> None:
        self._posts: dict[str, BlogPost] = {}

    async def insert(self, post: BlogPost) -> BlogPost:
        if post.id in self._posts:
            raise ValueError(f"Duplicate post id: {post.id}")
        self._posts[post.id] = post
        return post

    async def insert_many(self, posts: Iterable[BlogPost]) -> list[BlogPost]:
        return [await self.insert(p) for p in posts]

    async def get(self, post_id: str) -> BlogPost | None:
        return self._posts.get(post_id)

    async def find_one(self) -> BlogPost | None:
        return next(iter(self._posts.values()), None)

    async def find_all(self) -> list[BlogPost]:
        return sorted(self._posts.values(), key=lambda p: p.created)

    async def count(self) -> int:
        return len(self._posts)

    async def update(self, post_id: str, fields: Mapping[str, str]) -> BlogPost | None:
        post = self._posts.get(post_id)
        if post is None:
            return None
        updated = apply_update(post, fields)
        self._posts[post_id] = updated
        return updated

    async def delete(self, post_id: str) -> bool:
        return self._posts.pop(post_id, None) is not None

    async def drop(self) -> None:
        dropped = len(self._posts)
        self._posts.clear()
        log.debug("store_dropped", backend="memory", dropped=dropped)

    def __len__(self) -> int:
        return len(self._posts)

    async def aclose(self) -> None:
        """No-op; in-memory store needs no cleanup."""
