from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from site_backend.routers.deps import get_services, http_errors, json_body, require_auth
from site_backend.services.auth_service import bearer_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(request: Request, body: Any = Depends(json_body)):
    username = body.get("username") if isinstance(body, dict) else None
    password = body.get("password") if isinstance(body, dict) else None
    if not isinstance(username, str) or not isinstance(password, str):
        raise HTTPException(400, "username and password are required")
    with http_errors():
        session = get_services(request).auth.login(username, password)
    return {"token": session.token, "username": session.username, "expiresAt": int(session.expires_at)}


@router.post("/logout")
def logout(request: Request):
    get_services(request).auth.logout(bearer_token(request))
    return {"ok": True}


@router.get("/me")
def me(username: str = Depends(require_auth)):
    return {"username": username}
