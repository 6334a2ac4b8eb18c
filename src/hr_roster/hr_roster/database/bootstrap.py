"""Schema bootstrap for the MySQL store.

Used by ``create_app`` when ``AUTO_INIT_DB`` is set and by ``scripts/init_db.py``.
Every statement in ``database/schema.sql`` is idempotent (``CREATE ... IF NOT EXISTS``).
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parents[4] / "database" / "schema.sql"

# A statement ends at a ';' outside quotes; quoted strings may contain ';' and escaped quotes.
_TOKEN = re.compile(r"""'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|`[^`]*`|;|[^;'"`]+|['"`]""", re.S)
_DB_SELECTION = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")


def _config(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "hr_roster")),
    )


def _connect(config: DBConfig, *, select_db: bool = True):
    kwargs = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
    }
    if select_db:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def split_statements(sql: str) -> Iterator[str]:
    """Yield the statements of a SQL script.

    ``--`` comment lines and ``CREATE DATABASE`` / ``USE`` lines are dropped so
    the script applies to whichever database the settings name.
    """
    body = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))
    body = _DB_SELECTION.sub("", body)

    current: list[str] = []
    for token in _TOKEN.findall(body):
        if token == ";":
            stmt = "".join(current).strip()
            if stmt:
                yield stmt
            current = []
        else:
            current.append(token)

    tail = "".join(current).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = _config(db_config)
    conn = _connect(config, select_db=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> int:
    """Create the database if needed and run the schema. Returns the statement count."""
    config = _config(db_config)
    ensure_database_exists(db_config)
    statements = list(split_statements(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connect(config)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()

    logger.info("Applied %s statement(s) from %s to %s", len(statements), schema_path, config.database)
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_config(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(str(row[0]) for row in cur.fetchall())
    finally:
        conn.close()
