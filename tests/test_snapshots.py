import os
import tempfile
import unittest
from decimal import Decimal

from ledgerbook.db import create_db, get_conn
from ledgerbook.errors import IntegrityError
from ledgerbook.ledger.snapshots import get_last_time_balance

METHODS = ["test1", "test 2"]


def _set_snapshot(conn, id_num, values):
    conn.execute('UPDATE balance_all SET "test1" = ?, "test 2" = ? WHERE id_num = ?', (*values, id_num))


class SnapshotLocatorTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.conn = get_conn(os.path.join(self._tmp.name, "ledger.sqlite3"))
        create_db(self.conn, METHODS, seed_years=2)

    def tearDown(self):
        self.conn.close()
        self._tmp.cleanup()

    def test_first_month_starts_at_zero(self):
        _set_snapshot(self.conn, 1, ("5.00", "5.00"))
        balance = get_last_time_balance(self.conn, 0, 0, METHODS)
        self.assertEqual(balance, {"test1": Decimal("0"), "test 2": Decimal("0")})

    def test_reads_previous_month(self):
        _set_snapshot(self.conn, 6, ("10.50", "-3.25"))
        balance = get_last_time_balance(self.conn, 6, 0, METHODS)
        self.assertEqual(balance, {"test1": Decimal("10.50"), "test 2": Decimal("-3.25")})

    def test_carries_forward_per_account(self):
        _set_snapshot(self.conn, 2, ("7.00", "1.00"))
        _set_snapshot(self.conn, 4, ("0.00", "2.00"))
        # Month 9 of year 0: walks 9, 8, ..., 4 (test 2), then 3, 2 (test1)
        balance = get_last_time_balance(self.conn, 9, 0, METHODS)
        self.assertEqual(balance, {"test1": Decimal("7.00"), "test 2": Decimal("2.00")})

    def test_newest_non_zero_value_wins(self):
        _set_snapshot(self.conn, 3, ("1.00", "1.00"))
        _set_snapshot(self.conn, 5, ("9.00", "0.00"))
        balance = get_last_time_balance(self.conn, 5, 0, METHODS)
        self.assertEqual(balance, {"test1": Decimal("9.00"), "test 2": Decimal("1.00")})

    def test_crosses_year_boundary(self):
        _set_snapshot(self.conn, 12, ("100.00", "0.00"))
        balance = get_last_time_balance(self.conn, 2, 1, METHODS)
        self.assertEqual(balance["test1"], Decimal("100.00"))
        self.assertEqual(balance["test 2"], Decimal("0"))

    def test_unparseable_value_is_integrity_error(self):
        _set_snapshot(self.conn, 3, ("abc", "0.00"))
        with self.assertRaises(IntegrityError) as ctx:
            get_last_time_balance(self.conn, 3, 0, METHODS)
        self.assertEqual(ctx.exception.id_num, 3)
        self.assertEqual(ctx.exception.field, "test1")

    def test_missing_row_is_integrity_error(self):
        self.conn.execute("DELETE FROM balance_all WHERE id_num = 2")
        with self.assertRaises(IntegrityError) as ctx:
            get_last_time_balance(self.conn, 3, 0, METHODS)
        self.assertEqual(ctx.exception.id_num, 2)

    def test_does_not_write(self):
        _set_snapshot(self.conn, 4, ("1.00", "2.00"))
        before = self.conn.execute("SELECT * FROM balance_all ORDER BY id_num").fetchall()
        get_last_time_balance(self.conn, 8, 0, METHODS)
        after = self.conn.execute("SELECT * FROM balance_all ORDER BY id_num").fetchall()
        self.assertEqual(before, after)


if __name__ == "__main__":
    unittest.main()
