#!/usr/bin/env python3
"""
Initialize the document store table.

Creates the ``documents`` table used by every collection (lawyer
applications, transactions, blog posts). Works against PostgreSQL in
deployment and SQLite locally.

Usage:
    python scripts/init_database.py            # create tables
    python scripts/init_database.py drop       # drop tables (asks first)
    python scripts/init_database.py status     # documents per collection

    # With environment file
    ENV_FILE=.env.production python scripts/init_database.py

Environment Variables:
    DATABASE_URL - Full SQLAlchemy async URL
    DATABASE_HOST, DATABASE_PORT, DATABASE_NAME, DATABASE_USER,
    DATABASE_PASSWORD - PostgreSQL parts used when DATABASE_URL is unset
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Configure logging for CLI output
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables before settings are imported
from dotenv import load_dotenv  # noqa: E402

env_file = os.environ.get("ENV_FILE", ".env")
env_path = project_root / env_file
if env_path.exists():
    load_dotenv(env_path)
    logger.info(f"Loaded environment from: {env_path}")
else:
    logger.warning(f"No environment file found at: {env_path}")
    logger.info("Using system environment variables")


async def init_tables() -> None:
    """Create all database tables."""
    from counsel_admin.core.db_client import db

    logger.info("=== Document Store Initialization ===")

    logger.info("Testing database connection...")
    if not await db.test_connection():
        logger.error("Could not connect to database")
        logger.error("Please check DATABASE_URL or the DATABASE_* settings")
        sys.exit(1)

    logger.info("Database connection successful!")

    logger.info("Creating tables...")
    await db.create_tables()
    logger.info("Tables created successfully!")

    await db.close_all()
    logger.info("=== Initialization Complete ===")


async def drop_tables() -> None:
    """Drop all tables (use with caution!)."""
    from counsel_admin.core.db_client import db

    logger.warning("=== WARNING: Dropping All Tables ===")

    confirm = input("Are you sure you want to drop all tables? (type 'yes' to confirm): ")
    if confirm.lower() != "yes":
        logger.info("Aborted.")
        return

    await db.drop_tables()
    logger.info("All tables dropped.")
    await db.close_all()


async def show_status() -> None:
    """Show how many documents each collection holds."""
    from sqlalchemy import func, select

    from counsel_admin.core.db_client import db
    from counsel_admin.core.db_models import DocumentRecord

    logger.info("=== Document Store Status ===")

    if not await db.test_connection():
        logger.error("Could not connect to database")
        sys.exit(1)

    async with db.session() as session:
        result = await session.execute(
            select(DocumentRecord.collection, func.count())
            .group_by(DocumentRecord.collection)
            .order_by(DocumentRecord.collection)
        )
        rows = result.all()

    if rows:
        logger.info("Collections:")
        for collection, count in rows:
            logger.info(f"  - {collection}: {count} documents")
    else:
        logger.info("No documents found. Run 'init' to create tables.")

    await db.close_all()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Initialize the document store for Counsel Admin API"
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="init",
        choices=["init", "drop", "status"],
        help="Command to run (default: init)",
    )

    args = parser.parse_args()

    if args.command == "init":
        asyncio.run(init_tables())
    elif args.command == "drop":
        asyncio.run(drop_tables())
    elif args.command == "status":
        asyncio.run(show_status())


if __name__ == "__main__":
    main()
