"""
Ledger error taxonomy.

Every failure the ledger surfaces is one of these. None of them are retried
and none are turned into a default balance by the code that raises them.
"""


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ConnectivityError(LedgerError):
    """The database could not be reached or rejected a query."""
    pass


class NotFoundError(LedgerError):
    """A 'latest' lookup ran against an empty table."""
    pass


class SchemaError(LedgerError):
    """The account set is missing, empty, or does not match a transaction."""
    pass


class IntegrityError(LedgerError):
    """
    Persisted data that cannot be trusted: an unparseable number, a malformed
    transfer reference, an unknown transaction type, a missing snapshot row.
    """

    def __init__(self, message: str, id_num: int | None = None, field: str | None = None):
        self.id_num = id_num
        self.field = field
        context = []
        if id_num is not None:
            context.append(f"id_num={id_num}")
        if field is not None:
            context.append(f"field={field}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
