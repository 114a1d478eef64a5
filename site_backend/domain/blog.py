"""Blog post model. Posts are keyed by slug."""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from site_backend.domain.validation import (
    ensure_valid,
    format_date,
    is_iso_date,
    is_str,
    is_str_list,
    parse_date,
    utcnow,
)
from site_backend.repositories.entity_store import EntityCodec

SLUG_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


class BlogStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"


def _is_status(value: Any) -> bool:
    return isinstance(value, str) and value in {s.value for s in BlogStatus}


def _is_slug(value: Any) -> bool:
    return isinstance(value, str) and bool(SLUG_PATTERN.fullmatch(value))


_NEW_POST_FIELDS = {
    "title": is_str,
    "slug": _is_slug,
    "body": is_str,
    "tags": is_str_list,
    "authorId": is_str,
}
_NEW_POST_OPTIONAL = {"status": _is_status}
_POST_FIELDS = {"id": is_str, **_NEW_POST_FIELDS, "status": _is_status, "dateAdded": is_iso_date}
_POST_OPTIONAL = {"updateAuthorId": is_str, "dateUpdated": is_iso_date}


@dataclass
class NewBlogPost:
    title: str
    slug: str
    body: str
    tags: list[str]
    author_id: str
    status: BlogStatus = BlogStatus.DRAFT

    @classmethod
    def from_json(cls, value: Any) -> "NewBlogPost":
        data = ensure_valid("NewBlogPost", value, _NEW_POST_FIELDS, _NEW_POST_OPTIONAL)
        return cls(
            title=data["title"],
            slug=data["slug"],
            body=data["body"],
            tags=list(data["tags"]),
            author_id=data["authorId"],
            status=BlogStatus(data.get("status") or BlogStatus.DRAFT.value),
        )


@dataclass
class BlogPost:
    id: str
    title: str
    slug: str
    body: str
    tags: list[str]
    author_id: str
    date_added: datetime
    status: BlogStatus = BlogStatus.DRAFT
    update_author_id: Optional[str] = None
    date_updated: Optional[datetime] = None

    @classmethod
    def from_json(cls, value: Any) -> "BlogPost":
        data = ensure_valid("BlogPost", value, _POST_FIELDS, _POST_OPTIONAL)
        date_updated = data.get("dateUpdated")
        return cls(
            id=data["id"],
            title=data["title"],
            slug=data["slug"],
            body=data["body"],
            tags=list(data["tags"]),
            author_id=data["authorId"],
            date_added=parse_date(data["dateAdded"]),
            status=BlogStatus(data["status"]),
            update_author_id=data.get("updateAuthorId"),
            date_updated=parse_date(date_updated) if date_updated else None,
        )

    @classmethod
    def from_new_blog_post(cls, post_id: str, new_post: NewBlogPost) -> "BlogPost":
        return cls(
            id=post_id,
            title=new_post.title,
            slug=new_post.slug,
            body=new_post.body,
            tags=list(new_post.tags),
            author_id=new_post.author_id,
            date_added=utcnow(),
            status=new_post.status,
        )

    @property
    def is_posted(self) -> bool:
        return self.status == BlogStatus.POSTED

    def touched_by(self, author_id: str | None) -> "BlogPost":
        return replace(self, update_author_id=author_id or self.update_author_id, date_updated=utcnow())

    def to_json(self) -> dict:
        output = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "body": self.body,
            "tags": list(self.tags),
            "authorId": self.author_id,
            "dateAdded": format_date(self.date_added),
            "status": self.status.value,
        }
        if self.update_author_id is not None:
            output["updateAuthorId"] = self.update_author_id
        if self.date_updated is not None:
            output["dateUpdated"] = format_date(self.date_updated)
        return output


BLOG_POST_CODEC = EntityCodec(
    name="BlogPost",
    from_json=BlogPost.from_json,
    to_json=BlogPost.to_json,
    key_of=lambda post: post.slug,
)
