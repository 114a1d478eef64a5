"""Field checks used by the models' from_json validators."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from site_backend.core.errors import InvalidInputError

Check = Callable[[Any], bool]


def is_str(value: Any) -> bool:
    return isinstance(value, str)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def is_dict(value: Any) -> bool:
    return isinstance(value, dict)


def is_iso_date(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parse_date(value)
    except ValueError:
        return False
    return True


def optional(check: Check) -> Check:
    return lambda value: value is None or check(value)


def json_errors(value: Any, fields: Mapping[str, Check], optional_fields: Mapping[str, Check] | None = None) -> list[str]:
    """Return the invalid field names, or ["root"] when `value` is not an object."""
    if not isinstance(value, dict):
        return ["root"]
    errors = [name for name, check in fields.items() if name not in value or not check(value[name])]
    for name, check in (optional_fields or {}).items():
        if name in value and value[name] is not None and not check(value[name]):
            errors.append(name)
    return errors


def ensure_valid(kind: str, value: Any, fields: Mapping[str, Check], optional_fields: Mapping[str, Check] | None = None) -> dict:
    errors = json_errors(value, fields, optional_fields)
    if errors:
        raise InvalidInputError(f"Invalid {kind} JSON: {', '.join(errors)}", errors)
    return value


def parse_date(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
