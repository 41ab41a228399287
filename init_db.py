"""Initialize the database schema for the studio site.

Creates all tables. Pass ``--drop`` to drop existing tables first.
"""

import argparse
import asyncio
import sys

from studio.config import settings
from studio.db import build_engine, create_tables, drop_tables
from studio.models import Base


async def init_database(drop: bool = False):
    """Create all database tables."""
    print(f"Initializing database: {settings.db.url.split('@')[-1]}")
    engine = build_engine(settings.db)
    try:
        if drop:
            await drop_tables(engine)
            print("✓ Dropped existing tables")

        await create_tables(engine)
        print("✓ Created all tables")
    finally:
        await engine.dispose()

    print("\n✅ Database initialization complete!")
    print(f"Tables: {', '.join(Base.metadata.tables.keys())}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    try:
        asyncio.run(init_database(drop=args.drop))
    except Exception as e:
        print(f"\n❌ Error initializing database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
