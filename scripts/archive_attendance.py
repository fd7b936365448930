"""Move one month of attendance rows into attendance_archives.

    python scripts/archive_attendance.py 2024 5

Meant for a monthly cron job; the same operation is exposed at
POST /api/admin/attendance/archive.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.training_attendance.training_attendance.common.logging_setup import setup_logging
from src.training_attendance.training_attendance.container import build_container


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Archive attendance rows of a calendar month.")
    parser.add_argument("year", type=int)
    parser.add_argument("month", type=int, help="1-12")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(level=getattr(settings, "LOG_LEVEL", "INFO"), log_file=getattr(settings, "LOG_FILE", None))

    container = build_container(db_config=dict(settings.DB_CONFIG), secret_key=settings.SECRET_KEY)
    result = container.attendance_service.archive_attendance_records(args.year, args.month)
    print(
        f"OK: archived {result.archived_count} rows for {result.year:04d}-{result.month:02d} "
        f"in {result.batches} batch(es)"
    )


if __name__ == "__main__":
    main()
