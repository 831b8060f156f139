import sqlite3

from ..db import column_list, db_errors
from ..errors import NotFoundError, SchemaError


def get_last_balances(conn: sqlite3.Connection, tx_methods: list[str]) -> list[str]:
    """Values of the newest snapshot row for the given accounts, in that order."""
    if not tx_methods:
        raise SchemaError("no transaction methods requested")
    with db_errors("get_last_balances"):
        row = conn.execute(
            f"SELECT {column_list(tx_methods)} FROM balance_all ORDER BY id_num DESC LIMIT 1"
        ).fetchone()
    if row is None:
        raise NotFoundError("balance_all has no rows")
    return list(row)


def _last_id(conn: sqlite3.Connection, table: str) -> int:
    with db_errors(f"last id_num of {table}"):
        row = conn.execute(f"SELECT id_num FROM {table} ORDER BY id_num DESC LIMIT 1").fetchone()
    if row is None:
        raise NotFoundError(f"{table} has no rows")
    return row[0]


def get_last_tx_id(conn: sqlite3.Connection) -> int:
    return _last_id(conn, "tx_all")


def get_last_balance_id(conn: sqlite3.Connection) -> int:
    return _last_id(conn, "balance_all")
