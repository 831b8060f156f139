import sqlite3

from ..db import db_errors
from ..errors import SchemaError


def get_all_tx_methods(conn: sqlite3.Connection) -> list[str]:
    """
    Account names in snapshot column order, e.g. ["Bank", "Cash", "PayPal"].

    The set is whatever columns balance_all carries after id_num, so accounts
    added later show up at the end and never move.
    """
    with db_errors("get_all_tx_methods"):
        rows = conn.execute("PRAGMA table_info(balance_all)").fetchall()
    if not rows:
        raise SchemaError("balance_all table not found; the ledger has not been created")
    # (cid, name, type, notnull, dflt_value, pk)
    return [row[1] for row in sorted(rows, key=lambda r: r[0]) if row[1] != "id_num"]


def require_tx_methods(conn: sqlite3.Connection) -> list[str]:
    tx_methods = get_all_tx_methods(conn)
    if not tx_methods:
        raise SchemaError("ledger defines no transaction methods")
    return tx_methods
