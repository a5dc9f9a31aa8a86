"""
Script to load sample objectives into the configured database.
Replaces ALL existing objectives and values.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kpi_portal.database import get_db
from kpi_portal.seed import seed_expiry_scenarios, seed_sample_data


def generate_sample_data(include_expired=True):
    with get_db() as conn:
        count = seed_sample_data(conn)
        print(f"Created {count} sample objectives")
        if include_expired:
            ids = seed_expiry_scenarios(conn)
            print(f"Created {len(ids)} expiry scenario objectives")


if __name__ == "__main__":
    generate_sample_data(include_expired="--no-expired" not in sys.argv)
