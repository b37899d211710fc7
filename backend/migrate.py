#!/usr/bin/env python3
"""
Create the marketplace tables for the configured DATABASE_URL.

    python -m backend.migrate
"""

import logging

from sqlalchemy import inspect

from backend.app.config import load_settings
from backend.app.database import build_engine, init_db

logger = logging.getLogger(__name__)


def migrate() -> list[str]:
    settings = load_settings()
    engine = build_engine(settings.database_url)
    try:
        init_db(engine)
        tables = sorted(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    return tables


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    for name in migrate():
        logger.info("table ready: %s", name)
