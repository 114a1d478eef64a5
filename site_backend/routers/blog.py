from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from site_backend.domain.blog import BlogPost, NewBlogPost
from site_backend.routers.deps import get_services, http_errors, int_param, json_body, require_auth
from site_backend.services.blog_service import BlogService
from site_backend.services.pagination import DEFAULT_PAGE, DEFAULT_PAGINATION, Page

router = APIRouter(prefix="/api/blog", tags=["blog"])


def _blog(request: Request) -> BlogService:
    return get_services(request).blog


def _page_json(result: Page[BlogPost]) -> dict:
    return {"posts": [post.to_json() for post in result.items], "morePages": result.more_pages}


@router.get("")
def get_posts(request: Request, page: str | None = None, pagination: str | None = None):
    result = _blog(request).get_posts(int_param(page, DEFAULT_PAGE), int_param(pagination, DEFAULT_PAGINATION))
    return _page_json(result)


@router.get("/all")
def get_all_posts(
    request: Request,
    page: str | None = None,
    pagination: str | None = None,
    _user: str = Depends(require_auth),
):
    result = _blog(request).get_all_posts(int_param(page, DEFAULT_PAGE), int_param(pagination, DEFAULT_PAGINATION))
    return _page_json(result)


@router.get("/{slug}")
def find_by_slug(slug: str, request: Request):
    if not slug.strip():
        raise HTTPException(400, "Invalid Slug")
    with http_errors(not_found="No Blog Post"):
        return _blog(request).find_by_slug(slug).to_json()


@router.post("")
def add_new_post(request: Request, _user: str = Depends(require_auth), body: Any = Depends(json_body)):
    with http_errors(invalid="Invalid New Blog Post Input"):
        post = _blog(request).add_blog_post(NewBlogPost.from_json(body))
    return post.to_json()


@router.put("/{slug}")
def update_post(
    slug: str,
    request: Request,
    user: str = Depends(require_auth),
    body: Any = Depends(json_body),
):
    svc = _blog(request)
    with http_errors(not_found="No Blog Post", invalid="Invalid Blog Post Input"):
        current = svc.find_by_slug(slug)
        changes = BlogPost.from_new_blog_post(current.id, NewBlogPost.from_json(body))
        post = svc.update_blog_post(slug, changes, author_id=user)
    return post.to_json()


@router.delete("/{slug}")
def delete_post(slug: str, request: Request, _user: str = Depends(require_auth)):
    with http_errors(not_found="No Blog Post"):
        post = _blog(request).delete_blog_post(slug)
    return post.to_json()
