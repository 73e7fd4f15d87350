import argparse
import os
import sys

# Add project root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlmodel import Session

from core.config import settings
from core.database import engine, create_db_and_tables
from core.exceptions import SwiftRegistryError
from core.logger import get_logger
from services.registry_store import SQLRegistryStore
from services.swift_import import load_swift_codes

logger = get_logger("db_init")

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the SWIFT codes database from an Excel file.")
    parser.add_argument(
        "--file",
        default=settings.SWIFT_CODES_FILE_PATH,
        help="Path to the SWIFT codes spreadsheet (default: SWIFT_CODES_FILE_PATH)",
    )
    args = parser.parse_args(argv)

    logger.info(f"Initializing database with SWIFT codes from: {args.file}")
    try:
        create_db_and_tables()
        with Session(engine) as session:
            count = load_swift_codes(args.file, SQLRegistryStore(session))
    except SwiftRegistryError as e:
        logger.error(f"Database initialization failed: {e.message}")
        return 1

    logger.info(f"Database initialization completed successfully ({count} SWIFT codes)")
    return 0

if __name__ == "__main__":
    sys.exit(main())
