"""Admin login and bearer-token sessions (kept in memory, lost on restart)."""
from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import Request

from site_backend.core.config import Settings, get_settings
from site_backend.core.errors import UnauthorizedError
from site_backend.core.security import new_token, verify_password


@dataclass
class AuthSession:
    token: str
    username: str
    expires_at: float


class AuthService:
    """Checks admin credentials and tracks issued tokens until they expire."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._sessions: Dict[str, AuthSession] = {}
        self._lock = threading.Lock()

    def login(self, username: str, password: str) -> AuthSession:
        expected = self.settings.admin_username
        if not (
            self.settings.admin_password_hash
            and secrets.compare_digest(username or "", expected)
            and verify_password(password or "", self.settings.admin_password_hash)
        ):
            raise UnauthorizedError("Invalid Credentials")
        ttl = max(60, self.settings.session_ttl_seconds)
        session = AuthSession(token=new_token(), username=username, expires_at=time.time() + ttl)
        with self._lock:
            self._sessions[session.token] = session
        return session

    def current_user(self, token: str | None) -> Optional[str]:
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.expires_at < time.time():
                del self._sessions[token]
                return None
            return session.username

    def logout(self, token: str | None) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization") or ""
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()
