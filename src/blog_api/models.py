"""Pydantic models for blog post documents and their API representations."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuthorName(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class BlogPost(BaseModel):
    """Stored blog post document. ``id`` and ``created`` are server-assigned."""

    id: str = Field(default_factory=_new_id, description="Opaque unique identifier")
    title: str
    content: str
    author: AuthorName
    created: datetime = Field(default_factory=_utcnow, description="UTC creation time")

    def to_view(self) -> "PostView":
        return PostView(
            id=self.id,
            title=self.title,
            content=self.content,
            author=self.author.full_name,
            created=self.created,
        )


class PostCreate(BaseModel):
    """POST /posts body. Client-sent ``id`` or ``created`` keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    title: str
    content: str
    author: AuthorName

    def to_post(self) -> BlogPost:
        return BlogPost(title=self.title, content=self.content, author=self.author)


class PostUpdate(BaseModel):
    """PUT /posts/{id} body. Only ``title`` and ``content`` are updatable."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="Must match the path id")
    title: str | None = None
    content: str | None = None

    def changes(self) -> dict[str, str]:
        return self.model_dump(include={"title", "content"}, exclude_unset=True, exclude_none=True)


class PostView(BaseModel):
    """JSON shape returned to API clients. Author is the display name."""

    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    content: str
    author: str
    created: datetime
