#!/usr/bin/env python3
"""Export a user's expenses for one month (or all time) as CSV or Excel."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker import config
from expense_tracker.errors import ExpenseTrackerError
from expense_tracker.session import ExpenseSession
from expense_tracker.stores import open_stores


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Export an expense report.')
    parser.add_argument('--month', default=None, help='Month to export as YYYY-MM (default: all time)')
    parser.add_argument('--format', dest='fmt', choices=['csv', 'xlsx'], default='csv')
    parser.add_argument('--backend', choices=list(config.SUPPORTED_BACKENDS), default=None)
    parser.add_argument('--user', default=None, help='User whose expenses to export (SQLite backend)')
    parser.add_argument('--store-path', type=Path, default=None, help='Database file or local JSON store')
    parser.add_argument('--output-dir', type=Path, default=None, help=f'Where to write (default: {config.REPORTS_DIR})')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    try:
        session = ExpenseSession(*open_stores(args.backend, args.user, args.store_path))
        session.load()
        session.select_month(args.month)
        report = session.export(args.fmt)
    except ExpenseTrackerError as exc:
        print(f"❌ {exc}")
        return 1

    output_dir = args.output_dir or config.REPORTS_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / report.filename
    if isinstance(report.payload, bytes):
        target.write_bytes(report.payload)
    else:
        target.write_text(report.payload + '\n', encoding='utf-8')

    print(f"✅ Wrote {len(session.filtered_expenses())} expenses to {target}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
