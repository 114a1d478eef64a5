"""One-off migration script: JSON data files -> SQL documents table."""
from __future__ import annotations

from pathlib import Path
import sys

# make the site_backend package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from site_backend.core.config import get_settings
from site_backend.services.registry import build_services
from site_backend.repositories.persistence import SQLPersistence
from site_backend.db.create_tables import create_all


def migrate() -> None:
    settings = get_settings()
    if not settings.database_url:
        raise SystemExit("DATABASE_URL must be set")
    if settings.storage_backend != "file":
        raise SystemExit("Run with STORAGE_BACKEND=file so the JSON files are the source")
    create_all()
    services = build_services(settings)
    stores = [
        services.blog.store,
        services.notes.store,
        services.file_data.store,
        *services.vice_bank.stores(),
    ]
    for store in stores:
        base_name = store.persistence.writer.base_name
        SQLPersistence(base_name).persist(store.snapshot())
        print(f"  {base_name}: {len(store)} records")


if __name__ == "__main__":
    migrate()
    print("JSON data migrated to SQL successfully.")
