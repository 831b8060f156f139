import sqlite3

from ..db import column_list, db_errors
from .dates import get_sql_dates
from .schema import require_tx_methods


def get_all_changes(conn: sqlite3.Connection, month: int, year: int) -> list[list[str]]:
    """Recorded per-account deltas of every transaction in a 0-based month, as stored."""
    tx_methods = require_tx_methods(conn)
    datetime_1, datetime_2 = get_sql_dates(month + 1, year)
    with db_errors("get_all_changes"):
        rows = conn.execute(
            f"SELECT {column_list(tx_methods)} FROM changes_all "
            "WHERE date BETWEEN ? AND ? ORDER BY date, id_num",
            (datetime_1, datetime_2),
        ).fetchall()
    return [list(row) for row in rows]


def get_empty_changes(conn: sqlite3.Connection) -> list[str]:
    # Placeholder Changes row for a month without transactions
    return ["Changes"] + ["0.00" for _ in require_tx_methods(conn)]
