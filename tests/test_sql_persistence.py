"""
Smoke tests for the SQL storage backend against a temporary SQLite database.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# make the site_backend package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy import select  # noqa: E402

from site_backend.core import config as core_config  # noqa: E402
from site_backend.db import session as db_session  # noqa: E402
from site_backend.db.models import DocumentBackup  # noqa: E402
from site_backend.domain.blog import BLOG_POST_CODEC, BlogStatus, NewBlogPost  # noqa: E402
from site_backend.repositories.persistence import SQLPersistence, open_store  # noqa: E402
from site_backend.services.blog_service import BlogService  # noqa: E402


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database; caches are reset so DATABASE_URL is re-read."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.reset_engine()

    yield db_file

    db_session.reset_engine()
    core_config.get_settings.cache_clear()


def _new_post(slug: str) -> NewBlogPost:
    return NewBlogPost(
        title=f"Title {slug}",
        slug=slug,
        body="body",
        tags=["python"],
        author_id="admin",
        status=BlogStatus.POSTED,
    )


def test_blog_posts_survive_reopen(temp_db):
    svc = BlogService(open_store(BLOG_POST_CODEC, SQLPersistence("blog_data")))
    svc.add_blog_post(_new_post("first-post"))
    svc.add_blog_post(_new_post("second-post"))
    svc.delete_blog_post("first-post")

    reopened = BlogService(open_store(BLOG_POST_CODEC, SQLPersistence("blog_data")))

    assert list(reopened.blog_posts) == ["second-post"]
    assert reopened.find_by_slug("second-post").tags == ["python"]


def test_collections_are_isolated(temp_db):
    blog = open_store(BLOG_POST_CODEC, SQLPersistence("blog_data"))
    other = open_store(BLOG_POST_CODEC, SQLPersistence("other_blog"))
    BlogService(blog).add_blog_post(_new_post("only-here"))

    assert len(open_store(BLOG_POST_CODEC, SQLPersistence("other_blog"))) == 0
    assert len(other) == 0


def test_backup_adds_a_row(temp_db):
    store = open_store(BLOG_POST_CODEC, SQLPersistence("blog_data"))
    BlogService(store).add_blog_post(_new_post("backed-up"))

    store.backup()

    with db_session.get_session() as session:
        rows = session.execute(select(DocumentBackup)).scalars().all()
    assert len(rows) == 1
    assert rows[0].collection == "blog_data"
    assert rows[0].name.startswith("blog_data_backup_")
    assert "backed-up" in rows[0].content
