"""
Remove demo/business data from the HR database, keeping users, roles and leave types.

Usage:
    python scripts/cleanup_demo_data.py [--yes]

Without --yes only the rows that would be removed are listed.
"""
import sys
import os
import argparse

from dotenv import load_dotenv

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
load_dotenv()

from app.db import SessionLocal
from app.services.data_cleanup import cleanup_demo_data, validate_clean_state


def main(confirm: bool = False) -> int:
    db = SessionLocal()
    try:
        state = validate_clean_state(db)
        if state["clean"]:
            print("[OK] Database already clean")
            return 0

        for table, count in state["remaining"].items():
            print(f"  {table}: {count} rows")
        if not confirm:
            print("\n[DRY-RUN] Re-run with --yes to delete these rows")
            return 0

        result = cleanup_demo_data(db)
        for error in result["errors"]:
            print(f"[WARN] {error}")
        print(f"\n[OK] Removed {result['records_removed']} records")

        after = validate_clean_state(db)
        if not after["clean"]:
            print(f"[WARN] Rows left behind: {after['remaining']}")
            return 1
        return 0 if result["success"] else 1
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Remove demo data from the HR payroll database")
    parser.add_argument("--yes", action="store_true", help="Actually delete the rows")
    args = parser.parse_args()

    sys.exit(main(confirm=args.yes))
