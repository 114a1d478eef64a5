#!/usr/bin/env python3
"""
Write a timestamped backup of every collection using the configured backend.

Usage:
  DATA_PATH=/srv/site/data python scripts/backup_data.py
"""
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from site_backend.core.config import get_settings
from site_backend.core.logging import configure_logging
from site_backend.services.registry import build_services


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    failed = build_services(settings).backup_all()
    if failed:
        raise SystemExit(f"Backup failed for: {', '.join(failed)}")
    print("OK: backup written")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI use
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
