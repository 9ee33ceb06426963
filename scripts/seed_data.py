#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from orders_api.core.config import DATABASE_URL, IS_PROD  # noqa: E402
from orders_api.core.database import Base, SessionLocal, engine  # noqa: E402
from orders_api.core.logging_setup import configure_logging  # noqa: E402
import orders_api.models  # noqa: E402,F401
from orders_api.services.seed import seed_database  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed sample customers, products and orders.")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (SQLite development databases only)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Allow running with ENV=prod",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    configure_logging()

    if IS_PROD and not args.force:
        print("Seeding is disabled in production. Use --force to override.")
        return 1

    if args.create_tables:
        if not DATABASE_URL.startswith("sqlite"):
            print("--create-tables is only supported for SQLite; run 'alembic upgrade head' instead.")
            return 1
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        created = seed_database(db)
    finally:
        db.close()

    print(
        "Seed finished: customers={customers} products={products} orders={orders}".format(**created)
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
