#!/usr/bin/env python3
"""
Replay a range of months and report their closing balances.

Each replayed month with transactions rewrites its balance_all row, so this
doubles as a repair pass after manual edits to the database.

Usage:
    python scripts/heal_months.py                      # every month of 2022
    python scripts/heal_months.py --year 1 --from 3 --to 5
"""
from __future__ import annotations

from pathlib import Path
import argparse
import json
import os
import sys

# Ensure repo root is on sys.path and is the working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from ledgerbook.config import settings
from ledgerbook.db import get_conn
from ledgerbook.errors import NotFoundError
from ledgerbook.ledger.accessors import get_last_balances
from ledgerbook.ledger.replay import get_all_txs
from ledgerbook.ledger.schema import require_tx_methods
from ledgerbook.logging import setup_logging


def main():
    p = argparse.ArgumentParser(description="Replay months and rewrite their snapshots.")
    p.add_argument("--year", type=int, default=0, help="Year offset (0 = 2022)")
    p.add_argument("--from", dest="first", type=int, default=1, help="First month, 1-12")
    p.add_argument("--to", dest="last", type=int, default=12, help="Last month, 1-12")
    args = p.parse_args()

    setup_logging("heal_months", settings.db_path)
    conn = get_conn(settings.db_path)
    tx_methods = require_tx_methods(conn)

    report = {"year": args.year, "tx_methods": tx_methods, "months": []}
    for month in range(args.first - 1, args.last):
        _, balances, ids = get_all_txs(conn, month, args.year)
        report["months"].append({
            "month": month + 1,
            "tx_count": len(ids),
            "closing": dict(zip(tx_methods, balances[-1])) if balances else None,
        })
    try:
        report["latest"] = dict(zip(tx_methods, get_last_balances(conn, tx_methods)))
    except NotFoundError:
        report["latest"] = None
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
