import sqlite3

import structlog

from ..db import column_list, db_errors, ensure_snapshot_rows, write_unit
from ..errors import NotFoundError, SchemaError
from ..models import Transaction, new_transaction
from .accessors import get_last_tx_id
from .dates import get_sql_dates, month_slot, snapshot_id
from .replay import get_all_txs
from .schema import require_tx_methods

log = structlog.get_logger()


def _next_tx_id(conn: sqlite3.Connection) -> int:
    try:
        return get_last_tx_id(conn) + 1
    except NotFoundError:
        return 1


def _change_row(tx: Transaction, tx_methods: list[str]) -> list[str]:
    deltas = tx.deltas()
    for name in deltas:
        if name not in tx_methods:
            raise SchemaError(f"transaction method {name!r} does not exist")
    return [f"{deltas.get(name, 0):.2f}" for name in tx_methods]


def later_months(conn: sqlite3.Connection, month: int, year: int) -> list[tuple[int, int]]:
    """(month, year) slots after the given one that hold at least one transaction."""
    _, upper = get_sql_dates(month + 1, year)
    with db_errors("later_months"):
        rows = conn.execute(
            "SELECT DISTINCT substr(date, 1, 7) FROM tx_all WHERE date > ? ORDER BY 1",
            (upper,),
        ).fetchall()
    return [month_slot(f"{r[0]}-01") for r in rows]


def add_new_tx(
    conn: sqlite3.Connection,
    date: str,
    details: str,
    tx_method: str,
    amount,
    tx_type: str,
) -> int:
    """
    Store one transaction and its change row, then replay its month and every
    later month with activity so their snapshots pick up the new balance.
    Returns the new id_num.
    """
    tx_methods = require_tx_methods(conn)
    id_num = _next_tx_id(conn)
    tx = new_transaction(date, details, tx_method, amount, tx_type, id_num)
    month, year = month_slot(tx.date, id_num=id_num)
    changes = _change_row(tx, tx_methods)

    # The tx_all row never exists without its changes_all row
    with write_unit(conn, "add_new_tx") as cur:
        cur.execute(
            "INSERT INTO tx_all(date, details, tx_method, amount, tx_type, id_num) VALUES(?,?,?,?,?,?)",
            (tx.date, tx.details, tx.account_ref(), f"{tx.amount:.2f}", tx.tx_type, id_num),
        )
        cur.execute(
            f"INSERT INTO changes_all(date, id_num, {column_list(tx_methods)}) "
            f"VALUES(?, ?, {', '.join('?' for _ in tx_methods)})",
            (tx.date, id_num, *changes),
        )
    ensure_snapshot_rows(conn, snapshot_id(month, year))
    log.info("tx_added", id_num=id_num, date=tx.date, tx_type=tx.tx_type, tx_method=tx.account_ref())

    get_all_txs(conn, month, year)
    for later_month, later_year in later_months(conn, month, year):
        get_all_txs(conn, later_month, later_year)
    return id_num
