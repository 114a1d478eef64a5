from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest

# make the site_backend package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from site_backend.core.config import get_settings  # noqa: E402
from site_backend.core.errors import UnauthorizedError  # noqa: E402
from site_backend.core.security import hash_password, verify_password  # noqa: E402
from site_backend.services.auth_service import AuthService  # noqa: E402


@pytest.fixture()
def settings():
    get_settings.cache_clear()
    base = get_settings()
    yield replace(base, admin_username="admin", admin_password_hash=hash_password("s3cret"), session_ttl_seconds=3600)
    get_settings.cache_clear()


def test_hash_round_trip():
    stored = hash_password("pw")

    assert stored.startswith("argon2$")
    assert verify_password("pw", stored) is True
    assert verify_password("other", stored) is False
    assert verify_password("pw", "") is False
    assert verify_password("pw", "not-a-hash") is False


def test_login_issues_token_and_logout_revokes(settings):
    svc = AuthService(settings)

    session = svc.login("admin", "s3cret")

    assert svc.current_user(session.token) == "admin"
    svc.logout(session.token)
    assert svc.current_user(session.token) is None


def test_login_rejects_bad_credentials(settings):
    svc = AuthService(settings)

    with pytest.raises(UnauthorizedError):
        svc.login("admin", "wrong")
    with pytest.raises(UnauthorizedError):
        svc.login("root", "s3cret")


def test_login_disabled_without_configured_hash(settings):
    svc = AuthService(replace(settings, admin_password_hash=""))

    with pytest.raises(UnauthorizedError):
        svc.login("admin", "")


def test_expired_sessions_are_dropped(settings, monkeypatch):
    svc = AuthService(settings)
    session = svc.login("admin", "s3cret")

    import site_backend.services.auth_service as auth_module

    monkeypatch.setattr(auth_module.time, "time", lambda: session.expires_at + 1)

    assert svc.current_user(session.token) is None
