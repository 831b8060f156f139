from ..errors import IntegrityError

EPOCH_YEAR = 2022
# Year offsets get_sql_dates renders as real four-digit years
MAX_YEAR_OFFSET = 7


def get_sql_dates(month: int, year: int) -> tuple[str, str]:
    """
    Inclusive ISO bounds for a 1-based month and a year offset from 2022.

    The upper bound is always day 31, e.g. (2022-02-01, 2022-02-31). It is only
    meaningful under plain string comparison; do not pass it through SQLite's
    date(), which rolls 02-31 forward into March.
    """
    new_month = f"{month:02d}"
    new_year = str(year)
    # Offsets 0..7 map to 2022..2029. Offset 8 renders as "20210" and 9+ pass
    # through as the bare offset; kept as-is so existing ranges stay stable.
    if year + 1 < 10:
        new_year = f"202{year + 2}"
    return f"{new_year}-{new_month}-01", f"{new_year}-{new_month}-31"


def snapshot_id(month: int, year: int) -> int:
    """id_num of the snapshot row closing a 0-based month."""
    return month + 1 + year * 12


def to_display_date(value: str, id_num: int | None = None) -> str:
    """2022-07-19 -> 19-07-2022"""
    parts = value.split("-")
    if len(parts) != 3:
        raise IntegrityError(f"stored date {value!r} is not YYYY-MM-DD", id_num=id_num, field="date")
    return f"{parts[2]}-{parts[1]}-{parts[0]}"


def month_slot(value: str, id_num: int | None = None) -> tuple[int, int]:
    """(0-based month, year offset) of an ISO date, e.g. 2022-07-19 -> (6, 0)."""
    try:
        year, month = int(value[0:4]), int(value[5:7])
    except ValueError as e:
        raise IntegrityError(f"stored date {value!r} is not YYYY-MM-DD", id_num=id_num, field="date") from e
    offset = year - EPOCH_YEAR
    if not 0 <= offset <= MAX_YEAR_OFFSET:
        raise IntegrityError(
            f"{value!r} is outside {EPOCH_YEAR}..{EPOCH_YEAR + MAX_YEAR_OFFSET}",
            id_num=id_num,
            field="date",
        )
    return month - 1, offset
