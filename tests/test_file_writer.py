from __future__ import annotations

import re
import sys
from datetime import datetime, timezone
from pathlib import Path

# make the site_backend package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from site_backend.repositories.file_writer import FileServiceWriter, backup_timestamp  # noqa: E402


def test_read_file_creates_directory_and_empty_file(tmp_path):
    writer = FileServiceWriter("blog_data", "json")
    target_dir = tmp_path / "nested" / "blog"

    assert writer.read_file(target_dir) == ""
    assert (target_dir / "blog_data.json").is_file()


def test_write_to_file_replaces_previous_content(tmp_path):
    writer = FileServiceWriter("blog_data", "json")
    writer.write_to_file(tmp_path, '[{"id": "a", "long": "xxxxxxxxxxxxxxxx"}]')
    writer.write_to_file(tmp_path, "[]")

    assert (tmp_path / "blog_data.json").read_text(encoding="utf-8") == "[]"
    assert writer.read_file(tmp_path) == "[]"


def test_clear_file_writes_empty_array(tmp_path):
    writer = FileServiceWriter("notes_data")
    writer.write_to_file(tmp_path, "garbage")
    writer.clear_file(tmp_path)

    assert writer.read_file(tmp_path) == "[]"


def test_backup_name_uses_iso_utc_timestamp_with_milliseconds():
    writer = FileServiceWriter("purchase_data", "json")
    moment = datetime(2024, 3, 5, 7, 8, 9, 123000, tzinfo=timezone.utc)

    assert writer.backup_name(moment) == "purchase_data_backup_2024-03-05T07:08:09.123Z.json"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", backup_timestamp())


def test_write_backup_creates_directory_and_honours_explicit_name(tmp_path):
    writer = FileServiceWriter("blog_data", "json")
    backup_dir = tmp_path / "backup"

    auto = writer.write_backup(backup_dir, "[1]")
    named = writer.write_backup(backup_dir, "[2]", "manual.json")

    assert auto.parent == backup_dir
    assert auto.name.startswith("blog_data_backup_") and auto.name.endswith(".json")
    assert auto.read_text(encoding="utf-8") == "[1]"
    assert named == backup_dir / "manual.json"
    assert named.read_text(encoding="utf-8") == "[2]"
    # the live file is untouched by backups
    assert not (tmp_path / "blog_data.json").exists()
