"""
Transaction entities.

A transaction touches either one account (Income, Expense) or two (Transfer).
The database keeps the account reference as a single string, with transfers
written as "<from> to <to>"; that encoding is parsed and checked here and
nowhere else.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import IntegrityError

TRANSFER_SEPARATOR = " to "

TX_TYPES = ("Income", "Expense", "Transfer")

CENT = Decimal("0.01")


class Income(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["Income"] = "Income"
    account: str = Field(min_length=1)

    def deltas(self, amount: Decimal) -> dict[str, Decimal]:
        return {self.account: amount}


class Expense(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["Expense"] = "Expense"
    account: str = Field(min_length=1)

    def deltas(self, amount: Decimal) -> dict[str, Decimal]:
        return {self.account: -amount}


class Transfer(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["Transfer"] = "Transfer"
    from_account: str = Field(min_length=1)
    to_account: str = Field(min_length=1)

    @model_validator(mode="after")
    def _distinct(self):
        if self.from_account == self.to_account:
            raise ValueError("transfer source and destination must differ")
        return self

    def deltas(self, amount: Decimal) -> dict[str, Decimal]:
        return {self.from_account: -amount, self.to_account: amount}


Effect = Union[Income, Expense, Transfer]


def parse_effect(tx_type: str, tx_method: str, id_num: int | None = None) -> Effect:
    """Build the typed effect from the stored (tx_type, tx_method) pair."""
    try:
        if tx_type == "Income":
            return Income(account=tx_method)
        if tx_type == "Expense":
            return Expense(account=tx_method)
        if tx_type == "Transfer":
            parts = tx_method.split(TRANSFER_SEPARATOR)
            if len(parts) != 2 or not all(parts):
                raise IntegrityError(
                    f"transfer reference {tx_method!r} must name exactly two accounts",
                    id_num=id_num,
                    field="tx_method",
                )
            return Transfer(from_account=parts[0], to_account=parts[1])
    except ValidationError as e:
        raise IntegrityError(
            f"invalid account reference {tx_method!r}: {e.errors()[0]['msg']}",
            id_num=id_num,
            field="tx_method",
        ) from e
    raise IntegrityError(
        f"unknown transaction type {tx_type!r}, expected one of {', '.join(TX_TYPES)}",
        id_num=id_num,
        field="tx_type",
    )


def parse_amount(raw, id_num: int | None = None, field: str = "amount") -> Decimal:
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError) as e:
        raise IntegrityError(f"{raw!r} is not a decimal number", id_num=id_num, field=field) from e
    if not value.is_finite():
        raise IntegrityError(f"{raw!r} is not a finite number", id_num=id_num, field=field)
    return value


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id_num: int
    date: str
    details: str
    amount: Decimal
    effect: Effect = Field(discriminator="kind")

    @classmethod
    def from_row(cls, row) -> "Transaction":
        """row: (date, details, tx_method, amount, tx_type, id_num) as stored in tx_all."""
        tx_date, details, tx_method, amount, tx_type, id_num = row
        return cls(
            id_num=id_num,
            date=tx_date,
            details=details,
            amount=parse_amount(amount, id_num=id_num),
            effect=parse_effect(tx_type, tx_method, id_num=id_num),
        )

    @property
    def tx_type(self) -> str:
        return self.effect.kind

    def account_ref(self) -> str:
        if isinstance(self.effect, Transfer):
            return f"{self.effect.from_account}{TRANSFER_SEPARATOR}{self.effect.to_account}"
        return self.effect.account

    def accounts(self) -> list[str]:
        if isinstance(self.effect, Transfer):
            return [self.effect.from_account, self.effect.to_account]
        return [self.effect.account]

    def deltas(self) -> dict[str, Decimal]:
        return self.effect.deltas(self.amount)


def new_transaction(tx_date: str, details: str, tx_method: str, amount, tx_type: str, id_num: int) -> Transaction:
    """Validate user-supplied fields for a transaction that is about to be stored."""
    try:
        # Rejects 2022-02-30 as well as compact forms like 20220201
        valid = date.fromisoformat(tx_date).isoformat() == tx_date
    except (TypeError, ValueError):
        valid = False
    if not valid:
        raise IntegrityError(f"{tx_date!r} is not a YYYY-MM-DD calendar date", id_num=id_num, field="date")
    value = parse_amount(amount, id_num=id_num)
    try:
        cents = value.quantize(CENT)
    except InvalidOperation as e:
        raise IntegrityError(f"amount {value} is too large", id_num=id_num, field="amount") from e
    if value != cents:
        raise IntegrityError(f"amount {value} has more than two decimal places", id_num=id_num, field="amount")
    if value <= 0:
        raise IntegrityError(f"amount must be positive, got {value}", id_num=id_num, field="amount")
    return Transaction(
        id_num=id_num,
        date=tx_date,
        details=details,
        amount=value,
        effect=parse_effect(tx_type, tx_method, id_num=id_num),
    )
