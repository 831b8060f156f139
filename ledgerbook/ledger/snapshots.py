import sqlite3
from decimal import Decimal

import structlog

from ..db import column_list, db_errors
from ..errors import IntegrityError
from ..models import parse_amount

log = structlog.get_logger()


def read_snapshot_row(conn: sqlite3.Connection, id_num: int, tx_methods: list[str]) -> list[Decimal]:
    with db_errors("read_snapshot_row"):
        row = conn.execute(
            f"SELECT {column_list(tx_methods)} FROM balance_all WHERE id_num = ?",
            (id_num,),
        ).fetchone()
    if row is None:
        raise IntegrityError("snapshot row is missing", id_num=id_num, field="id_num")
    return [parse_amount(val, id_num=id_num, field=name) for name, val in zip(tx_methods, row)]


def get_last_time_balance(
    conn: sqlite3.Connection,
    month: int,
    year: int,
    tx_methods: list[str],
) -> dict[str, Decimal]:
    """
    Balance of every account going into a 0-based month, e.g.
    {"Bank": Decimal("10.50"), "Cash": Decimal("100.00")}.

    Walks the snapshot rows backwards from the previous month and takes, per
    account, the first non-zero value it meets. Accounts that are zero all the
    way back to the first month stay at 0.
    """
    # The previous month's snapshot shares this month's 0-based slot number
    target_id_num = month + year * 12

    final_value = {name: Decimal("0") for name in tx_methods}
    if target_id_num <= 0 or not tx_methods:
        return final_value

    resolved: set[str] = set()
    rows_read = 0
    while True:
        balances = read_snapshot_row(conn, target_id_num, tx_methods)
        rows_read += 1
        target_id_num -= 1

        for name, value in zip(tx_methods, balances):
            if name not in resolved and value != 0:
                final_value[name] = value
                resolved.add(name)

        if target_id_num == 0 or len(resolved) == len(tx_methods):
            break

    log.debug(
        "baseline_located",
        month=month,
        year=year,
        rows_read=rows_read,
        unresolved=[n for n in tx_methods if n not in resolved],
    )
    return final_value
