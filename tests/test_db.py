import os
import sqlite3
import tempfile
import unittest

from ledgerbook.db import add_tx_methods, create_db, ensure_snapshot_rows, get_conn
from ledgerbook.errors import ConnectivityError, SchemaError
from ledgerbook.ledger.accessors import get_last_balance_id
from ledgerbook.ledger.schema import get_all_tx_methods


class CreateDbTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.conn = get_conn(os.path.join(self._tmp.name, "ledger.sqlite3"))

    def tearDown(self):
        self.conn.close()
        self._tmp.cleanup()

    def test_methods_keep_definition_order(self):
        create_db(self.conn, ["Cash", "Bank", "test 2"], seed_years=1)
        self.assertEqual(get_all_tx_methods(self.conn), ["Cash", "Bank", "test 2"])
        self.assertEqual(get_last_balance_id(self.conn), 12)

    def test_seeded_rows_are_zero(self):
        create_db(self.conn, ["Cash"], seed_years=1)
        values = {r[0] for r in self.conn.execute('SELECT "Cash" FROM balance_all').fetchall()}
        self.assertEqual(values, {"0.00"})

    def test_added_methods_are_appended(self):
        create_db(self.conn, ["Cash", "Bank"], seed_years=1)
        self.assertEqual(add_tx_methods(self.conn, ["PayPal"]), ["Cash", "Bank", "PayPal"])
        self.assertEqual(get_all_tx_methods(self.conn), ["Cash", "Bank", "PayPal"])
        cols = [r[1] for r in self.conn.execute("PRAGMA table_info(changes_all)").fetchall()]
        self.assertEqual(cols, ["date", "id_num", "Cash", "Bank", "PayPal"])
        row = self.conn.execute('SELECT "PayPal" FROM balance_all WHERE id_num = 3').fetchone()
        self.assertEqual(row[0], "0.00")

    def test_rejects_bad_method_sets(self):
        for methods in ([], ["Cash", "Cash"], [""], ["id_num"], ["Bank to Cash"]):
            with self.subTest(methods=methods):
                with self.assertRaises(SchemaError):
                    create_db(self.conn, methods)

    def test_add_rejects_existing_name(self):
        create_db(self.conn, ["Cash"], seed_years=1)
        with self.assertRaises(SchemaError):
            add_tx_methods(self.conn, ["Cash"])

    def test_missing_ledger_is_schema_error(self):
        with self.assertRaises(SchemaError):
            get_all_tx_methods(self.conn)

    def test_ensure_snapshot_rows_fills_gaps(self):
        create_db(self.conn, ["Cash"], seed_years=1)
        self.conn.execute("DELETE FROM balance_all WHERE id_num = 5")
        self.assertEqual(ensure_snapshot_rows(self.conn, 14), 3)
        self.assertEqual(get_last_balance_id(self.conn), 14)

    def test_sqlite_errors_become_connectivity_errors(self):
        self.conn.close()
        with self.assertRaises(ConnectivityError) as ctx:
            get_all_tx_methods(self.conn)
        self.assertIsInstance(ctx.exception.__cause__, sqlite3.Error)


if __name__ == "__main__":
    unittest.main()
