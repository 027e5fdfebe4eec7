"""Redis-backed post store and the store factory.

Each post is a JSON string at ``{prefix}post:{id}``. A sorted set at
``{prefix}posts``, scored by the post's creation timestamp, indexes them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

import structlog

from blog_api.models import BlogPost
from blog_api.store import MemoryPostStore, PostStore, apply_update

if TYPE_CHECKING:
    from redis.asyncio import Redis

log = structlog.get_logger()

_POST_PREFIX = "post:"
_INDEX_KEY = "posts"
_DROP_BATCH = 500


def _decode(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


def _escape_glob(text: str) -> str:
    """Escape SCAN MATCH metacharacters so *text* matches literally."""
    return re.sub(r"([\\*?\[\]])", r"\\\1", text)


class RedisPostStore:
    """Document store over Redis strings plus a sorted-set index.

    Implements PostStore protocol. Backend errors propagate to the caller.
    """

    def __init__(self, client: Redis, key_prefix: str = "blog:") -> None:
        self._client: Redis = client
        self._prefix = key_prefix

    def _post_key(self, post_id: str) -> str:
        return f"{self._prefix}{_POST_PREFIX}{post_id}"

    @property
    def _index_key(self) -> str:
        return f"{self._prefix}{_INDEX_KEY}"

    async def insert(self, post: BlogPost) -> BlogPost:
        await self.insert_many([post])
        return post

    async def insert_many(self, posts: Iterable[BlogPost]) -> list[BlogPost]:
        batch = list(posts)
        if not batch:
            return []
        keys = [self._post_key(p.id) for p in batch]
        if len(set(keys)) != len(keys) or await self._client.exists(*keys):
            raise ValueError("Duplicate post id in insert")

        # Documents and index entries land together or not at all
        async with self._client.pipeline(transaction=True) as pipe:
            for key, post in zip(keys, batch, strict=True):
                pipe.set(key, post.model_dump_json(by_alias=True))
            pipe.zadd(self._index_key, {p.id: p.created.timestamp() for p in batch})
            await pipe.execute()
        log.debug("posts_inserted", backend="redis", count=len(batch))
        return batch

    async def get(self, post_id: str) -> BlogPost | None:
        raw = await self._client.get(self._post_key(post_id))
        if raw is None:
            return None
        return BlogPost.model_validate_json(raw)

    async def find_one(self) -> BlogPost | None:
        ids = await self._client.zrange(self._index_key, 0, 0)
        if not ids:
            return None
        return await self.get(_decode(ids[0]))

    async def find_all(self) -> list[BlogPost]:
        ids = await self._client.zrange(self._index_key, 0, -1)
        if not ids:
            return []
        raws = await self._client.mget([self._post_key(_decode(i)) for i in ids])
        return [BlogPost.model_validate_json(raw) for raw in raws if raw is not None]

    async def count(self) -> int:
        result: int = await self._client.zcard(self._index_key)
        return result

    async def update(self, post_id: str, fields: Mapping[str, str]) -> BlogPost | None:
        post = await self.get(post_id)
        if post is None:
            return None
        updated = apply_update(post, fields)
        stored = await self._client.set(
            self._post_key(post_id), updated.model_dump_json(by_alias=True), xx=True
        )
        if not stored:
            # Deleted between read and write
            return None
        return updated

    async def delete(self, post_id: str) -> bool:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.delete(self._post_key(post_id))
            pipe.zrem(self._index_key, post_id)
            deleted, _ = await pipe.execute()
        return bool(deleted)

    async def drop(self) -> None:
        """Delete every key under this store's prefix."""
        dropped = 0
        batch: list[bytes | str] = []
        async for key in self._client.scan_iter(match=f"{_escape_glob(self._prefix)}*"):
            batch.append(key)
            if len(batch) >= _DROP_BATCH:
                dropped += await self._client.delete(*batch)
                batch.clear()
        if batch:
            dropped += await self._client.delete(*batch)
        log.debug("store_dropped", backend="redis", prefix=self._prefix, dropped=dropped)

    async def aclose(self) -> None:
        """Close the underlying Redis connection."""
        await self._client.aclose()


def _create_redis_client(redis_url: str | None) -> Redis:
    """Create a Redis async client from a URL."""
    import redis.asyncio as aioredis

    if not redis_url:
        msg = "REDIS_URL is required when STORE_BACKEND=redis"
        raise ValueError(msg)

    return aioredis.from_url(redis_url)


def create_store(
    backend: str,
    redis_url: str | None = None,
    key_prefix: str = "blog:",
) -> PostStore:
    """Factory: create a PostStore for the given backend."""
    if backend == "redis":
        return RedisPostStore(_create_redis_client(redis_url), key_prefix)
    return MemoryPostStore()
