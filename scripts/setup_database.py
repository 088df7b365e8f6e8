#!/usr/bin/env python3
"""Create the expense tracker tables and indexes in the SQLite database."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker import config, db
from expense_tracker.errors import StoreError


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Create the expense tracker database schema.')
    parser.add_argument('--db', type=Path, default=None, help=f'Database file (default: {config.DB_PATH})')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    print("🚀 Monthly Expense Tracker - Database Setup")

    if args.db is None:
        config.ensure_data_directories()
    try:
        path = db.init_db(args.db)
        schema = db.describe_schema(path)
    except StoreError as exc:
        print(f"❌ {exc}")
        return 1

    missing = [name for name in db.TABLES + db.INDEXES if name not in schema['tables'] + schema['indexes']]
    if missing:
        print(f"❌ Missing after setup: {', '.join(missing)}")
        return 1

    print(f"\n📋 Summary for {path}:")
    print(f"   ✅ Tables: {', '.join(db.TABLES)}")
    print(f"   ✅ Indexes: {', '.join(db.INDEXES)}")
    print("   ✅ Checks: amount > 0 on expenses, amount >= 0 on budgets, one budget per user")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
