#!/usr/bin/env python3
"""
Initialize the MealPlanner database.
Creates tables and, on PostgreSQL, the row-level security policies and
updated_at triggers.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import create_engine, inspect

from app.config import settings
from domain.models.database import drop_database, engine as default_engine, init_database

logger = logging.getLogger("mealplanner.init_db")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create the MealPlanner schema")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy URL to initialize (defaults to DATABASE_URL / settings)",
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop all tables before creating them",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=settings.log_level, format=settings.log_format)

    if args.drop and settings.is_production():
        logger.error("✗ Refusing to drop tables in production")
        return 1

    bind = create_engine(args.database_url) if args.database_url else default_engine
    logger.info("=" * 60)
    logger.info(f"Initializing {settings.app_name} database at {bind.url.render_as_string(hide_password=True)}")
    logger.info("=" * 60)

    try:
        if args.drop:
            drop_database(bind)
        init_database(bind)

        tables = inspect(bind).get_table_names()
        logger.info(f"✓ {len(tables)} tables ready: {', '.join(sorted(tables))}")
        return 0
    except Exception as e:
        logger.error(f"✗ Failed to initialize database: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
