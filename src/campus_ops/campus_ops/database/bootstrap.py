"""Schema and seed loading for local/dev databases."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Union

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")
_LINE_COMMENT_RE = re.compile(r"(?m)^\s*--.*$")


def _prepare(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the SQL file.
    sql = _CREATE_DB_RE.sub("", sql)
    sql = _USE_RE.sub("", sql)
    return _LINE_COMMENT_RE.sub("", sql)


def split_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote = None
    escaped = False

    for ch in sql:
        buf.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def run_script(db_config: dict, path: Union[str, Path]) -> int:
    """Execute every statement of an SQL file in one transaction. Returns the statement count."""
    sql = _prepare(Path(path).read_text(encoding="utf-8"))
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in split_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    return count


def apply_schema(db_config: dict, *, schema_path: Union[str, Path]) -> None:
    ensure_database_exists(db_config)
    count = run_script(db_config, schema_path)
    logger.info("Schema applied from %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: Union[str, Path]) -> None:
    count = run_script(db_config, seed_path)
    logger.info("Seed data applied from %s (%d statements)", seed_path, count)


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
