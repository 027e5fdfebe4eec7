"""CRUD endpoints for blog posts."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from blog_api import metrics
from blog_api.models import PostCreate, PostUpdate, PostView
from blog_api.store import PostStore

log = structlog.get_logger()

router = APIRouter(prefix="/posts", tags=["posts"])

_NOT_FOUND = "Post not found"


def get_store(request: Request) -> PostStore:
    """FastAPI dependency: the document store attached to the running app."""
    store: PostStore = request.app.state.store
    return store


async def _not_found(operation: str, post_id: str) -> HTTPException:
    metrics.post_requests_total.add(1, {"operation": operation, "outcome": "not_found"})
    await log.ainfo("post_not_found", operation=operation, post_id=post_id)
    return HTTPException(status_code=404, detail=_NOT_FOUND)


@router.get("", response_model=list[PostView])
async def list_posts(store: PostStore = Depends(get_store)) -> list[PostView]:
    posts = await store.find_all()
    metrics.post_requests_total.add(1, {"operation": "list", "outcome": "ok"})
    return [p.to_view() for p in posts]


@router.get("/{post_id}", response_model=PostView)
async def read_post(post_id: str, store: PostStore = Depends(get_store)) -> PostView:
    post = await store.get(post_id)
    if post is None:
        raise await _not_found("read", post_id)
    metrics.post_requests_total.add(1, {"operation": "read", "outcome": "ok"})
    return post.to_view()


@router.post("", status_code=201, response_model=PostView)
async def create_post(body: PostCreate, store: PostStore = Depends(get_store)) -> PostView:
    post = await store.insert(body.to_post())
    metrics.post_requests_total.add(1, {"operation": "create", "outcome": "ok"})
    metrics.posts_created_total.add(1)
    await log.ainfo("post_created", post_id=post.id)
    return post.to_view()


@router.put("/{post_id}", status_code=204)
async def update_post(
    post_id: str, body: PostUpdate, store: PostStore = Depends(get_store)
) -> Response:
    if body.id != post_id:
        metrics.post_requests_total.add(1, {"operation": "update", "outcome": "id_mismatch"})
        await log.awarning("post_update_id_mismatch", path_id=post_id, body_id=body.id)
        raise HTTPException(
            status_code=400,
            detail=f"Request path id ({post_id}) and request body id ({body.id}) must match",
        )
    changes = body.changes()
    if await store.update(post_id, changes) is None:
        raise await _not_found("update", post_id)
    metrics.post_requests_total.add(1, {"operation": "update", "outcome": "ok"})
    metrics.posts_updated_total.add(1)
    await log.ainfo("post_updated", post_id=post_id, fields=sorted(changes))
    return Response(status_code=204)


@router.delete("/{post_id}", status_code=204)
async def delete_post(post_id: str, store: PostStore = Depends(get_store)) -> Response:
    if not await store.delete(post_id):
        raise await _not_found("delete", post_id)
    metrics.post_requests_total.add(1, {"operation": "delete", "outcome": "ok"})
    metrics.posts_deleted_total.add(1)
    await log.ainfo("post_deleted", post_id=post_id)
    return Response(status_code=204)
