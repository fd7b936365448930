"""Dump the training attendance database with `mysqldump`.

Archive first (scripts/archive_attendance.py) if the dump is meant to be small.
"""

from __future__ import annotations

import argparse
import importlib
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Back up the configured database with mysqldump.")
    parser.add_argument("--out-dir", type=Path, default=REPO_ROOT / "backups")
    args = parser.parse_args(argv)

    db = importlib.import_module(get_settings_module()).DB_CONFIG
    args.out_dir.mkdir(parents=True, exist_ok=True)
    out_file = args.out_dir / f"{db['database']}_{datetime.now():%Y%m%d_%H%M%S}.sql"

    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        "--single-transaction",
        db["database"],
    ]

    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True)
    except FileNotFoundError:
        raise SystemExit("mysqldump not found; install the MySQL client tools.")
    except subprocess.CalledProcessError as e:
        out_file.unlink(missing_ok=True)
        raise SystemExit(f"mysqldump failed: {e.stderr.decode(errors='replace').strip()}")
    print(f"OK: backup written to {out_file}")


if __name__ == "__main__":
    main()
