"""Blog use cases: listing, lookup by slug and slug-aware mutations."""

from __future__ import annotations

import uuid
from dataclasses import replace
from pathlib import Path
from typing import List

from site_backend.core.errors import DuplicateEntityError, NotFoundError
from site_backend.domain.blog import BLOG_POST_CODEC, BlogPost, NewBlogPost
from site_backend.repositories.entity_store import EntityStore
from site_backend.repositories.persistence import build_persistence, open_store
from site_backend.services.pagination import DEFAULT_PAGINATION, Page, paginate

BASE_NAME = "blog_data"


def _newest_first(posts: List[BlogPost]) -> List[BlogPost]:
    return sorted(posts, key=lambda post: post.date_added, reverse=True)


class BlogService:
    """Blog posts keyed by slug. Storage is whatever the injected store persists to."""

    def __init__(self, store: EntityStore[BlogPost] | None = None) -> None:
        self.store = store if store is not None else EntityStore(BLOG_POST_CODEC)

    @classmethod
    def open(cls, backend: str, path: str | Path) -> "BlogService":
        persistence = build_persistence(backend, path=path, base_name=BASE_NAME)
        return cls(open_store(BLOG_POST_CODEC, persistence))

    @property
    def blog_posts(self) -> dict[str, BlogPost]:
        return self.store.entities

    @property
    def posted_blog_posts(self) -> List[BlogPost]:
        return [post for post in self.store.entities_list if post.is_posted]

    def get_posts(self, page: int = 1, pagination: int = DEFAULT_PAGINATION) -> Page[BlogPost]:
        """Posted entries only, newest first."""
        return paginate(_newest_first(self.posted_blog_posts), page, pagination)

    def get_all_posts(self, page: int = 1, pagination: int = DEFAULT_PAGINATION) -> Page[BlogPost]:
        return paginate(_newest_first(self.store.entities_list), page, pagination)

    def find_by_slug(self, slug: str) -> BlogPost:
        try:
            return self.store.get(slug)
        except NotFoundError:
            raise NotFoundError("Blog Post Does Not Exist") from None

    def add_blog_post(self, new_post: NewBlogPost) -> BlogPost:
        post = BlogPost.from_new_blog_post(str(uuid.uuid4()), new_post)
        with self.store.lock:
            if self.store.contains(post.slug):
                raise DuplicateEntityError(f"Slug {post.slug} already in use")
            return self.store.add(post)

    def update_blog_post(self, old_slug: str, updated_post: BlogPost, *, author_id: str | None = None) -> BlogPost:
        with self.store.lock:
            current = self.find_by_slug(old_slug)
            if updated_post.slug != old_slug and self.store.contains(updated_post.slug):
                raise DuplicateEntityError(f"Slug {updated_post.slug} already in use")
            # id and creation date are not editable
            post = replace(updated_post, id=current.id, date_added=current.date_added).touched_by(author_id)
            return self.store.update(post, old_key=old_slug)

    def delete_blog_post(self, slug: str) -> BlogPost:
        try:
            return self.store.delete(slug)
        except NotFoundError:
            raise NotFoundError("Blog Post Does Not Exist") from None

    def backup(self) -> None:
        self.store.backup()
