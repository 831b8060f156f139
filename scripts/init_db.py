#!/usr/bin/env python3
"""
Create a ledger database, or add transaction methods to an existing one.

Usage:
    python scripts/init_db.py Bank Cash PayPal        # new ledger
    python scripts/init_db.py --add Savings           # append methods
"""
from pathlib import Path
import argparse
import os
import sys

# Ensure repo root is on sys.path and is the working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from ledgerbook.config import settings
from ledgerbook.db import add_tx_methods, create_db, get_conn
from ledgerbook.ledger.schema import get_all_tx_methods
from ledgerbook.logging import setup_logging


def main():
    p = argparse.ArgumentParser(description="Create the ledger database or extend its transaction methods.")
    p.add_argument("methods", nargs="+", help="Transaction method names, in column order")
    p.add_argument("--add", action="store_true", help="Append to an existing ledger instead of creating one")
    p.add_argument("--seed-years", type=int, default=None, help="Years of zero snapshot rows to seed")
    args = p.parse_args()

    setup_logging("init_db", settings.db_path)
    conn = get_conn(settings.db_path)
    if args.add:
        add_tx_methods(conn, args.methods)
    else:
        create_db(conn, args.methods, seed_years=args.seed_years)
    print("Ledger ready at", settings.db_path, "| methods:", ", ".join(get_all_tx_methods(conn)))


if __name__ == "__main__":
    main()
