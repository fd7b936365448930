from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_ADMIN_ID = "ad000000-0000-4000-8000-000000000001"
DEMO_FACULTY_ID = "fa000000-0000-4000-8000-000000000001"
DEMO_SECTION_ID = "5ec7104e-0000-4000-8000-000000000001"
DEMO_SCHEDULE_ID = "5c4ed001-0000-4000-8000-000000000001"
DEMO_ROOM_ID = "7a1d6c0e-0000-4000-8000-000000000001"

# schema.sql / seed.sql carry their own CREATE DATABASE + USE for manual runs
_DB_SELECTION_RE = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b.*?;\s*$")
_LINE_COMMENT_RE = re.compile(r"(?m)^\s*--.*$")


def _connect(config: DBConfig, *, with_database: bool = True):
    # setup scripts bypass the pool: they may run before the database exists
    kwargs = config.connect_kwargs()
    if not with_database:
        kwargs.pop("database")
    return mysql.connector.connect(use_pure=True, **kwargs)


def _prepare_sql(sql: str) -> str:
    return _LINE_COMMENT_RE.sub("", _DB_SELECTION_RE.sub("", sql))


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Splits on ';' outside quoted strings.
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            continue
        if ch == ";" and quote is None:
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql_file(db_config: dict, path: str | Path) -> None:
    config = DBConfig.from_dict(db_config)
    sql = _prepare_sql(Path(path).read_text(encoding="utf-8"))

    conn = _connect(config)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _exec_sql_file(db_config, schema_path)
    logger.info("Applied schema %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _exec_sql_file(db_config, seed_path)
    logger.info("Applied seed %s", seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo admin/faculty and give the demo section a short timetable.

    Time slots reference the faculty, so they are created here rather than in seed.sql.
    """
    config = DBConfig.from_dict(db_config)
    conn = _connect(config)
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(user_id: str, full_name: str, username: str, email: str, password: str, role: str) -> None:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, email=%s, password_hash=%s, role=%s, is_active=1
                    WHERE username=%s
                    """,
                    (full_name, email, password_hash, role, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (user_id, username, full_name, email, password_hash, role)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (user_id, username, full_name, email, password_hash, role),
                )

        upsert_user(DEMO_ADMIN_ID, "Admin Demo", "admin", "admin@example.edu", "admin123", "admin")
        upsert_user(DEMO_FACULTY_ID, "Faculty Demo", "faculty", "faculty@example.edu", "faculty123", "faculty")

        cur.execute("SELECT user_id FROM users WHERE username='faculty'")
        faculty_id = cur.fetchone()["user_id"]

        cur.execute("SELECT COUNT(*) AS n FROM time_slots WHERE section_id=%s", (DEMO_SECTION_ID,))
        if int(cur.fetchone()["n"]) == 0:
            slots = [
                ("09:00", "10:00", 0, None),
                ("10:00", "11:00", 0, None),
                ("11:00", "11:15", 1, "Tea break"),
                ("11:15", "12:15", 0, None),
            ]
            for start, end, is_break, desc in slots:
                cur.execute(
                    """
                    INSERT INTO time_slots
                        (start_time, end_time, is_break, break_description, section_id, incharge_faculty_id, room_id, schedule_id)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (start, end, is_break, desc, DEMO_SECTION_ID, faculty_id, DEMO_ROOM_ID, DEMO_SCHEDULE_ID),
                )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
