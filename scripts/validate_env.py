#!/usr/bin/env python3
"""Environment validation script for the stock tracker."""

import asyncio
import os
import sys
from pathlib import Path

from stock_tracker.config import get_config
from stock_tracker.infrastructure.database import DatabaseAdapter
from stock_tracker.storage.repositories import WatchlistRepository

REQUIRED_ENV_VARS = ("EXCHANGE_API_KEY", "DATABASE_URL")
CONFIG_FILES = ("quotes.yaml", "rates.yaml", "database.yaml", "sync.yaml")


def validate_environment() -> bool:
    """Validate required environment variables."""
    print("🔍 Validating environment configuration...")

    all_valid = True
    for var in REQUIRED_ENV_VARS:
        if os.getenv(var):
            print(f"✅ {var}: Set")
        else:
            print(f"❌ {var}: Missing")
            all_valid = False
    return all_valid


def check_config_files(config_dir: str) -> bool:
    """Check the YAML configuration files exist."""
    missing = [name for name in CONFIG_FILES if not (Path(config_dir) / name).exists()]
    if missing:
        print(f"❌ Missing configuration files in {config_dir}: {', '.join(missing)}")
        return False
    print("✅ All configuration files found")
    return True


async def validate_database() -> bool:
    """Validate the database is reachable and the watchlists table can be created."""
    config = get_config()
    db = DatabaseAdapter(config.database)
    try:
        await db.connect()
        await WatchlistRepository(db, table=config.database.table).ensure_schema()
        print(f"✅ Database: table '{config.database.table}' ready")
        return True
    except Exception as e:
        print(f"❌ Database: {e}")
        return False
    finally:
        await db.disconnect()


async def main() -> bool:
    """Run all validations."""
    print("🚀 Stock Tracker Environment Validation")
    print("=" * 50)

    config_dir = os.getenv("STOCK_TRACKER_CONFIG_DIR", "./config")
    env_valid = validate_environment()
    files_valid = check_config_files(config_dir)
    db_valid = await validate_database()

    print("=" * 50)

    if env_valid and files_valid and db_valid:
        print("🎉 All validations passed! System is ready.")
        return True
    print("💥 Validation failed. Please check the errors above.")
    return False


if __name__ == "__main__":
    success = asyncio.run(main())
    sys.exit(0 if success else 1)
