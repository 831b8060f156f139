import sqlite3
from decimal import Decimal

import structlog

from ..db import column_list, db_errors, quote_ident
from ..errors import SchemaError
from ..models import Transaction
from .dates import get_sql_dates, snapshot_id, to_display_date
from .schema import require_tx_methods
from .snapshots import get_last_time_balance

log = structlog.get_logger()

TX_COLUMNS = "date, details, tx_method, amount, tx_type, id_num"


def fetch_month_rows(conn: sqlite3.Connection, month: int, year: int) -> list[tuple]:
    """Raw tx_all rows of a 0-based month, same-day rows in insertion order."""
    datetime_1, datetime_2 = get_sql_dates(month + 1, year)
    with db_errors("fetch_month_rows"):
        return conn.execute(
            f"SELECT {TX_COLUMNS} FROM tx_all WHERE date BETWEEN ? AND ? ORDER BY date, id_num",
            (datetime_1, datetime_2),
        ).fetchall()


def _format_balances(balance: dict[str, Decimal], tx_methods: list[str]) -> list[str]:
    return [f"{balance[name]:.2f}" for name in tx_methods]


def apply_transaction(balance: dict[str, Decimal], tx: Transaction):
    for name in tx.accounts():
        if name not in balance:
            raise SchemaError(f"transaction {tx.id_num} references unknown transaction method {name!r}")
    for name, delta in tx.deltas().items():
        balance[name] += delta


def heal_snapshot(conn: sqlite3.Connection, id_num: int, tx_methods: list[str], values: list[str]) -> bool:
    """
    Overwrite one snapshot row with freshly replayed balances.

    Returns True when the stored row differed from (or lacked) the new values.
    """
    cols = ", ".join(f"{quote_ident(name)} = ?" for name in tx_methods)
    with db_errors("heal_snapshot"):
        cur = conn.cursor()
        before = cur.execute(
            f"SELECT {column_list(tx_methods)} FROM balance_all WHERE id_num = ?",
            (id_num,),
        ).fetchone()
        if before is None:
            cur.execute("INSERT INTO balance_all(id_num) VALUES(?)", (id_num,))
        cur.execute(f"UPDATE balance_all SET {cols} WHERE id_num = ?", (*values, id_num))
    changed = before is None or list(before) != list(values)
    if changed:
        log.info(
            "snapshot_healed",
            id_num=id_num,
            before=list(before) if before is not None else None,
            after=list(values),
        )
    return changed


def get_all_txs(
    conn: sqlite3.Connection,
    month: int,
    year: int,
) -> tuple[list[list[str]], list[list[str]], list[str]]:
    """
    Replay one 0-based month of transactions.

    Returns three parallel lists in (date, id_num) order:
      - display rows: [DD-MM-YYYY, details, tx_method, amount, tx_type]
      - every account's balance after that transaction, as "0.00" strings
      - the transaction id_num as a string

    The month's closing balances are written back to its snapshot row, which
    repairs any drift between balance_all and tx_all. Nothing is written for a
    month without transactions.
    """
    tx_methods = require_tx_methods(conn)
    balance = get_last_time_balance(conn, month, year, tx_methods)
    rows = fetch_month_rows(conn, month, year)

    final_all_txs: list[list[str]] = []
    final_all_balances: list[list[str]] = []
    all_id_num: list[str] = []

    for row in rows:
        tx = Transaction.from_row(row)
        apply_transaction(balance, tx)

        tx_date, details, tx_method, amount, tx_type, id_num = row
        final_all_txs.append([to_display_date(tx_date, id_num=id_num), details, tx_method, amount, tx_type])
        final_all_balances.append(_format_balances(balance, tx_methods))
        all_id_num.append(str(id_num))

    healed = False
    if final_all_balances:
        healed = heal_snapshot(conn, snapshot_id(month, year), tx_methods, final_all_balances[-1])

    log.debug("month_replayed", month=month, year=year, tx_count=len(all_id_num), healed=healed)
    return final_all_txs, final_all_balances, all_id_num
