"""Helpers shared by the routers: service lookup, auth dependency, error mapping."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from site_backend.core.errors import DuplicateEntityError, InvalidInputError, NotFoundError, UnauthorizedError
from site_backend.services.auth_service import bearer_token
from site_backend.services.registry import Services

logger = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    svc = getattr(getattr(request.app, "state", None), "services", None)
    if not svc:
        raise RuntimeError("Services not configured")
    return svc


def current_user(request: Request) -> str | None:
    return get_services(request).auth.current_user(bearer_token(request))


def require_auth(request: Request) -> str:
    """FastAPI dependency: the logged-in username, or 401."""
    user = current_user(request)
    if not user:
        raise HTTPException(401, "Not Authorized")
    return user


def int_param(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


async def json_body(request: Request) -> Any:
    """Dependency: the parsed JSON body, so write handlers can be plain `def`."""
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(400, "Invalid JSON body")


@contextmanager
def http_errors(not_found: str = "Not Found", invalid: str = "Invalid Input"):
    """Translate service errors into HTTP responses."""
    try:
        yield
    except NotFoundError:
        raise HTTPException(404, not_found)
    except InvalidInputError as exc:
        raise HTTPException(400, {"message": invalid, "fields": exc.fields})
    except DuplicateEntityError as exc:
        raise HTTPException(409, exc.message or "Conflict")
    except UnauthorizedError:
        raise HTTPException(401, "Not Authorized")
    except (OSError, SQLAlchemyError):
        logger.exception("Storage failure")
        raise HTTPException(500, "Server Error")
