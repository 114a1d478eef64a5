#!/usr/bin/env python3
"""
Generate the value for ADMIN_PASSWORD_HASH.

Usage:
  python scripts/hash_password.py            (prompts for the password)
  python scripts/hash_password.py --password s3cret
"""
from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from site_backend.core.security import hash_password


def main() -> None:
    ap = argparse.ArgumentParser(description="Hash an admin password with Argon2")
    ap.add_argument("--password", help="Password to hash (default: prompt)")
    args = ap.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Empty password")
    print(hash_password(password))


if __name__ == "__main__":
    main()
