import sqlite3
from contextlib import contextmanager
from pathlib import Path

import structlog

from .config import settings
from .errors import ConnectivityError, SchemaError
from .models import TRANSFER_SEPARATOR

log = structlog.get_logger()

ZERO = "0.00"

def get_conn(db_path: str) -> sqlite3.Connection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(db_path, isolation_level=None)  # autocommit
        conn.execute("PRAGMA journal_mode=WAL;")
    except sqlite3.Error as e:
        raise ConnectivityError(f"could not open ledger database at {db_path}: {e}") from e
    return conn

@contextmanager
def db_errors(action: str):
    """Re-raise any sqlite3 failure inside the block as ConnectivityError."""
    try:
        yield
    except sqlite3.Error as e:
        raise ConnectivityError(f"{action} failed: {e}") from e

@contextmanager
def write_unit(conn: sqlite3.Connection, action: str):
    """Run the block's statements as one BEGIN/COMMIT unit on an autocommit connection."""
    with db_errors(action):
        conn.execute("BEGIN")
        try:
            yield conn.cursor()
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'

def column_list(names) -> str:
    return ", ".join(quote_ident(n) for n in names)

DDL = [
    # Transactions (source of truth)
    """
CREATE TABLE IF NOT EXISTS tx_all (
  date TEXT NOT NULL,
  details TEXT NOT NULL,
  tx_method TEXT NOT NULL,
  amount TEXT NOT NULL,
  tx_type TEXT NOT NULL,
  id_num INTEGER PRIMARY KEY
);
""",
    "CREATE INDEX IF NOT EXISTS ix_tx_all_date_id ON tx_all(date, id_num);",
]

def _balance_ddl(tx_methods: list[str]) -> str:
    cols = ",\n".join(f"  {quote_ident(m)} TEXT NOT NULL DEFAULT '{ZERO}'" for m in tx_methods)
    return f"CREATE TABLE IF NOT EXISTS balance_all (\n  id_num INTEGER PRIMARY KEY,\n{cols}\n);"

def _changes_ddl(tx_methods: list[str]) -> str:
    cols = ",\n".join(f"  {quote_ident(m)} TEXT NOT NULL DEFAULT '{ZERO}'" for m in tx_methods)
    return f"CREATE TABLE IF NOT EXISTS changes_all (\n  date TEXT NOT NULL,\n  id_num INTEGER PRIMARY KEY,\n{cols}\n);"

def validate_tx_methods(new_methods: list[str], existing: list[str] | None = None) -> list[str]:
    existing = existing or []
    cleaned = [m.strip() for m in new_methods]
    if not cleaned:
        raise SchemaError("at least one transaction method is required")
    seen = set(existing)
    for name in cleaned:
        if not name:
            raise SchemaError("transaction method names cannot be blank")
        if name.lower() == "id_num":
            raise SchemaError("'id_num' is reserved and cannot be used as a transaction method")
        if TRANSFER_SEPARATOR in name:
            raise SchemaError(f"transaction method {name!r} contains the transfer separator {TRANSFER_SEPARATOR!r}")
        if name in seen:
            raise SchemaError(f"transaction method {name!r} is already defined")
        seen.add(name)
    return cleaned

def create_db(conn: sqlite3.Connection, tx_methods: list[str], seed_years: int | None = None):
    """Create the ledger tables for the given accounts and seed zero snapshot rows."""
    tx_methods = validate_tx_methods(tx_methods)
    years = seed_years if seed_years is not None else settings.snapshot_seed_years
    with db_errors("create_db"):
        cur = conn.cursor()
        for stmt in DDL:
            cur.execute(stmt)
        cur.execute(_balance_ddl(tx_methods))
        cur.execute(_changes_ddl(tx_methods))
    ensure_snapshot_rows(conn, years * 12)
    log.info("ledger_created", tx_methods=tx_methods, snapshot_rows=years * 12)

def add_tx_methods(conn: sqlite3.Connection, new_methods: list[str]) -> list[str]:
    """Append accounts as trailing columns. Existing column order never changes."""
    from .ledger.schema import get_all_tx_methods

    existing = get_all_tx_methods(conn)
    added = validate_tx_methods(new_methods, existing)
    with db_errors("add_tx_methods"):
        cur = conn.cursor()
        for name in added:
            for table in ("balance_all", "changes_all"):
                cur.execute(
                    f"ALTER TABLE {table} ADD COLUMN {quote_ident(name)} TEXT NOT NULL DEFAULT '{ZERO}'"
                )
    log.info("tx_methods_added", added=added, total=len(existing) + len(added))
    return existing + added

def ensure_snapshot_rows(conn: sqlite3.Connection, up_to_id: int) -> int:
    """Insert all-zero snapshot rows for any id_num in 1..up_to_id that is missing."""
    if up_to_id <= 0:
        return 0
    with db_errors("ensure_snapshot_rows"):
        cur = conn.cursor()
        existing = {r[0] for r in cur.execute(
            "SELECT id_num FROM balance_all WHERE id_num BETWEEN 1 AND ?", (up_to_id,)
        ).fetchall()}
        missing = [(i,) for i in range(1, up_to_id + 1) if i not in existing]
        if missing:
            # Remaining columns take their '0.00' default
            cur.executemany("INSERT INTO balance_all(id_num) VALUES(?)", missing)
    return len(missing)
