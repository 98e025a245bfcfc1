"""Data models for posts, categories and paging.

Backend payloads come in several shapes (content-manager entries, REST v5
flat entries, REST v4 entries nested under ``attributes``). The models below
accept all of them and expose one normalized view.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-z0-9-]")


def slugify(text: str) -> str:
    """Derive a URL slug: lower-case, whitespace to '-', drop other symbols.

    >>> slugify("Product News & Updates")
    'product-news--updates'
    """
    slug = _WHITESPACE_RE.sub("-", (text or "").strip().lower())
    return _NON_SLUG_RE.sub("", slug)


def _title_slug(title: str) -> str:
    """Slug used for a post created without one (whitespace runs only)."""
    return _WHITESPACE_RE.sub("-", (title or "").lower())


def _flatten(raw: Any) -> Any:
    """Lift REST v4 ``attributes`` onto the entry itself."""
    if not isinstance(raw, dict):
        return raw
    attributes = raw.get("attributes")
    if not isinstance(attributes, dict):
        return raw
    merged = dict(attributes)
    merged.update({k: v for k, v in raw.items() if k != "attributes"})
    return merged


# === Enums ===

class PostStatus(str, Enum):
    """Publication state of a post."""
    DRAFT = "draft"
    MODIFIED = "modified"  # only ever reported by the backend
    PUBLISHED = "published"


class NotificationKind(str, Enum):
    """Severity of a user-facing notice."""
    SUCCESS = "success"
    ERROR = "error"


# === Entries ===

class _Entry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MediaRef(_Entry):
    """Image attached to a post."""
    id: Optional[int] = None
    document_id: str = Field(default="", alias="documentId")
    name: str = ""
    alternative_text: Optional[str] = Field(default=None, alias="alternativeText")
    caption: Optional[str] = None
    url: str = ""
    mime: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return _flatten(data)


class CategoryRef(_Entry):
    """Category as embedded in a post (``populate[category]``)."""
    id: Optional[int] = None
    document_id: str = Field(default="", alias="documentId")
    name: str = ""
    description: Optional[str] = None
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        data = _flatten(data)
        if isinstance(data, dict) and not data.get("name") and data.get("text"):
            data = {**data, "name": data["text"]}
        return data


class Category(_Entry):
    """Category entry, normalized from whatever field names the backend uses."""
    id: Optional[int] = None
    document_id: str = Field(default="", alias="documentId")
    name: str
    slug: str
    description: str = ""
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")
    status: PostStatus = PostStatus.DRAFT

    @classmethod
    def from_api(cls, raw: dict) -> Category:
        """Build a Category from any of the backend's entry shapes.

        The display label lives in ``text`` on this backend's schema and in
        ``name`` on others; a missing label becomes "Unknown Category".
        """
        entry = _flatten(raw)
        name = entry.get("text") or entry.get("name") or "Unknown Category"
        published_at = entry.get("publishedAt")
        return cls(
            id=entry.get("id"),
            documentId=entry.get("documentId") or "",
            name=name,
            slug=entry.get("slug") or slugify(name),
            description=entry.get("description") or "",
            createdAt=entry.get("createdAt"),
            updatedAt=entry.get("updatedAt"),
            publishedAt=published_at,
            status=PostStatus.PUBLISHED if published_at else PostStatus.DRAFT,
        )


class Post(_Entry):
    """Blog post.

    ``status`` is derived from ``published_at`` unless the backend reports
    ``modified`` (published with unpublished draft changes), which is kept.
    """
    id: Optional[int] = None
    document_id: str = Field(alias="documentId")
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    slug: str = ""
    status: PostStatus = PostStatus.DRAFT
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    category: Optional[CategoryRef] = None
    image: Optional[MediaRef] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_status(cls, data: Any) -> Any:
        data = _flatten(data)
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # unset fields on in-progress drafts come back as null
        for key in ("documentId", "document_id", "title", "slug"):
            if key in data and data[key] is None:
                data[key] = ""
        for key in ("category", "image"):
            # v4 relations arrive wrapped as {"data": {...}} or {"data": null}
            value = data.get(key)
            if isinstance(value, dict) and set(value) == {"data"}:
                data[key] = value["data"]
        if data.get("status") != PostStatus.MODIFIED.value:
            published = data.get("publishedAt", data.get("published_at"))
            data["status"] = PostStatus.PUBLISHED if published else PostStatus.DRAFT
        return data

    @property
    def is_published(self) -> bool:
        return self.published_at is not None


# === Paging ===

class PaginationState(_Entry):
    """Paging metadata reported by the backend."""
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, alias="pageSize", gt=0)
    page_count: int = Field(default=1, alias="pageCount", ge=0)
    total: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _clamp_page(self) -> PaginationState:
        upper = max(self.page_count, 1)
        if self.page > upper:
            self.page = upper
        return self


class PostPage(BaseModel):
    """One page of posts plus its paging metadata."""
    items: list[Post] = Field(default_factory=list)
    pagination: PaginationState = Field(default_factory=PaginationState)

    @property
    def page(self) -> int:
        return self.pagination.page

    @property
    def page_count(self) -> int:
        return max(self.pagination.page_count, 1)


# === Form input ===

class PostFormData(BaseModel):
    """Editable fields of a post as submitted by the editor."""
    title: str
    description: str = ""
    content: str = ""
    slug: str = ""
    category_id: Optional[str] = None

    def to_payload(self, fill_slug: bool = False) -> dict:
        """Serialize for the content-manager API, omitting an empty category.

        Args:
            fill_slug: Derive the slug from the title when none was given
                (used on create; updates send the slug as entered).
        """
        slug = self.slug
        if fill_slug and not slug:
            slug = _title_slug(self.title)
        payload: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "slug": slug,
        }
        if self.category_id:
            payload["category"] = {"connect": [{"id": self.category_id}]}
        return payload


class CategoryFormData(BaseModel):
    """Editable fields of a category.

    The slug follows the name until edited independently.
    """
    name: str
    slug: str = ""

    @classmethod
    def from_name(cls, name: str) -> CategoryFormData:
        return cls(name=name, slug=slugify(name))

    def resolved_slug(self) -> str:
        return self.slug or slugify(self.name)

    def to_payload(self) -> dict:
        # The category schema stores the label in `text` and the slug-like
        # value in `description`.
        return {"text": self.name, "description": self.resolved_slug()}
