"""
Database initialization script.
Creates tables on the configured backend and optionally loads sample data.

Usage:
    python scripts/init_db.py            # create tables
    python scripts/init_db.py --seed     # reset and load sample objectives
    python scripts/init_db.py --seed --expired
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse

from kpi_portal.app_logger import setup_logging
from kpi_portal.config import USE_POSTGRES
from kpi_portal.database import get_db, init_database
from kpi_portal.seed import seed_expiry_scenarios, seed_sample_data


def main(argv=None):
    parser = argparse.ArgumentParser(description="Initialize the KPI Portal database")
    parser.add_argument("--seed", action="store_true", help="reset and load sample objectives")
    parser.add_argument("--expired", action="store_true", help="also add expiry scenario objectives")
    args = parser.parse_args(argv)

    setup_logging()
    print("=" * 60, flush=True)
    print("KPI Portal - Database Initialization", flush=True)
    print(f"Database: {'PostgreSQL' if USE_POSTGRES else 'SQLite'}", flush=True)
    print("=" * 60, flush=True)

    with get_db() as conn:
        print("\nStep 1: Creating database tables...")
        init_database(conn)

        if args.seed:
            print("\nStep 2: Loading sample objectives...")
            count = seed_sample_data(conn)
            print(f"  Created {count} objectives")

        if args.expired:
            print("\nStep 3: Adding expiry scenarios...")
            ids = seed_expiry_scenarios(conn)
            print(f"  Created {len(ids)} objectives")

    print("\nDone.")


if __name__ == "__main__":
    main()
