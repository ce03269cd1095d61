#!/usr/bin/env python3
"""Create a PostgreSQL database for integration tests.

Usage:
  python scripts/create_test_db.py
  python scripts/create_test_db.py --database keyward_test
  python scripts/create_test_db.py --database keyward_test --create-tables
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

import psycopg  # noqa: E402
import structlog  # noqa: E402
from psycopg import errors, sql  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from src.core.config import Settings  # noqa: E402

logger = structlog.get_logger(__name__)


def _connect(settings: Settings, database: str) -> psycopg.Connection[Any]:
    return psycopg.connect(
        dbname=database,
        user=settings.POSTGRES_USER,
        password=settings.POSTGRES_PASSWORD,
        host=settings.POSTGRES_SERVER,
        port=settings.POSTGRES_PORT,
        autocommit=True,
    )


def create_database(settings: Settings, target_db: str, maintenance_db: str) -> None:
    if not target_db:
        raise ValueError("Target database name is empty.")

    logger.info("create_test_db.start", target_db=target_db)
    try:
        with _connect(settings, maintenance_db) as conn:
            conn.execute(
                sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db))
            )
        logger.info("create_test_db.created", target_db=target_db)
    except errors.DuplicateDatabase:
        logger.info("create_test_db.exists", target_db=target_db)


def create_tables(settings: Settings, target_db: str) -> None:
    """Create every Keyward table from the SQLModel metadata."""
    # 导入模型以注册到 SQLModel.metadata
    from src.modules.app_users.infrastructure import models as _app_users  # noqa: F401
    from src.modules.applications.infrastructure import (  # noqa: F401
        models as _applications,
    )
    from src.modules.blacklist.infrastructure import models as _blacklist  # noqa: F401
    from src.modules.licenses.infrastructure import models as _licenses  # noqa: F401
    from src.modules.notifications.infrastructure import (  # noqa: F401
        models as _notifications,
    )

    url = settings.database_url_object.unicode_string().rsplit("/", 1)[0]
    engine = create_engine(f"{url}/{target_db}")
    try:
        SQLModel.metadata.create_all(engine)
        logger.info(
            "create_test_db.tables.done",
            target_db=target_db,
            tables=sorted(SQLModel.metadata.tables),
        )
    finally:
        engine.dispose()


def _parse_args(settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a PostgreSQL database")
    parser.add_argument(
        "--database",
        default=f"{settings.POSTGRES_DB}_test",
        help="Target database name (defaults to POSTGRES_DB + '_test').",
    )
    parser.add_argument(
        "--maintenance-db",
        default=os.getenv("POSTGRES_MAINTENANCE_DB", "postgres"),
        help="Maintenance database used to run CREATE DATABASE.",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create all tables after the database exists.",
    )
    return parser.parse_args()


def main() -> None:
    settings = Settings()
    args = _parse_args(settings)
    create_database(settings, args.database, args.maintenance_db)
    if args.create_tables:
        create_tables(settings, args.database)


if __name__ == "__main__":
    main()
