import unittest
from datetime import datetime

from depot import create_app
from depot.extensions import db
from depot.models import DocumentSequence
from depot.services.document_service import DocumentSequenceError, next_document_number


class DocumentNumberTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        })
        cls.ctx = cls.app.app_context()
        cls.ctx.push()
        db.create_all()

    @classmethod
    def tearDownClass(cls):
        db.session.remove()
        db.drop_all()
        cls.ctx.pop()

    def setUp(self):
        db.session.query(DocumentSequence).delete()
        db.session.commit()

    def test_first_number_of_period(self):
        number = next_document_number("ORDER", when=datetime(2026, 10, 19))
        db.session.commit()
        self.assertEqual(number, "ORD-2610-00001")

    def test_numbers_increment_within_period(self):
        when = datetime(2026, 10, 5)
        numbers = [next_document_number("PAYMENT", when=when) for _ in range(3)]
        db.session.commit()
        self.assertEqual(numbers, ["PAY-2610-00001", "PAY-2610-00002", "PAY-2610-00003"])

    def test_sequence_restarts_each_month(self):
        self.assertEqual(next_document_number("EXPENSE", when=datetime(2026, 10, 31)), "EXP-2610-00001")
        self.assertEqual(next_document_number("EXPENSE", when=datetime(2026, 10, 31)), "EXP-2610-00002")
        self.assertEqual(next_document_number("EXPENSE", when=datetime(2026, 11, 1)), "EXP-2611-00001")
        db.session.commit()

    def test_document_types_have_independent_counters(self):
        when = datetime(2027, 1, 2)
        self.assertEqual(next_document_number("ORDER", when=when), "ORD-2701-00001")
        self.assertEqual(next_document_number("TAX", when=when), "TAX-2701-00001")
        self.assertEqual(next_document_number("ORDER", when=when), "ORD-2701-00002")
        db.session.commit()

    def test_rolled_back_number_is_reused(self):
        when = datetime(2026, 12, 1)
        self.assertEqual(next_document_number("ORDER", when=when), "ORD-2612-00001")
        db.session.rollback()
        self.assertEqual(next_document_number("ORDER", when=when), "ORD-2612-00001")
        db.session.commit()

    def test_unknown_document_type(self):
        with self.assertRaises(DocumentSequenceError):
            next_document_number("INVOICE")


if __name__ == "__main__":
    unittest.main()
