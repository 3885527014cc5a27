"""
Concurrency tests against a file-backed SQLite database.

Threads share one engine, each with its own app context and session, the
way concurrent requests do.
"""

import os
import tempfile
import threading
import unittest

from depot import create_app
from depot.extensions import db
from depot.models import Customer, InventoryItem, Order, Payment
from depot.schemas import (
    CreateCustomerRequest,
    CreateItemRequest,
    CreateOrderRequest,
    OrderLineInput,
    RecordPaymentRequest,
)
from depot.services import balance_service, customer_service, inventory_service, order_service, payment_service
from depot.services.errors import InsufficientStockError


class ConcurrencyTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "concurrency.db")
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
            "TXN_RETRY_ATTEMPTS": 5,
            "TXN_RETRY_BACKOFF": 0.01,
        })

        with self.app.app_context():
            db.drop_all()
            db.create_all()

            customer = customer_service.create_customer(CreateCustomerRequest(
                name="Concurrent Customer",
                phone="08000000000",
                street="1 Depot Lane",
                city="Kano",
                state="Kano",
                customer_type="WHOLESALE",
                old_balance_cents=1000,
            ))
            self.customer_id = customer.id

            item = inventory_service.create_item(CreateItemRequest(
                item_name="Brown Beans",
                brand="Best Quality",
                category="BEANS",
                unit="BAG",
                unit_price_cents=1000,
                location="Warehouse A-01",
                supplier_name="Best Quality Ltd",
                supplier_contact="08099999999",
                quantity=10,
            ))
            self.item_id = item.id

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def _run(self, worker, count):
        threads = [threading.Thread(target=worker) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    def test_concurrent_orders_never_oversell(self):
        results = []
        lock = threading.Lock()

        def worker():
            with self.app.app_context():
                try:
                    order_service.create_order(CreateOrderRequest(
                        customer_id=self.customer_id,
                        lines=(OrderLineInput(inventory_item_id=self.item_id, quantity=3),),
                    ))
                    with lock:
                        results.append("created")
                except Exception as exc:
                    with lock:
                        results.append(exc)
                finally:
                    db.session.remove()

        self._run(worker, 6)

        created = sum(1 for r in results if r == "created")
        unexpected = [r for r in results if r != "created" and not isinstance(r, InsufficientStockError)]

        with self.app.app_context():
            item = db.session.get(InventoryItem, self.item_id)
            order_count = db.session.query(Order).count()
            customer = db.session.get(Customer, self.customer_id)

            self.assertFalse(unexpected)
            self.assertLessEqual(created, 3)
            self.assertEqual(order_count, created)
            self.assertEqual(item.quantity, 10 - 3 * created)
            self.assertGreaterEqual(item.quantity, 0)
            self.assertEqual(customer.total_orders, created)

    def test_concurrent_payments_keep_wallet_consistent(self):
        with self.app.app_context():
            order_service.create_order(CreateOrderRequest(
                customer_id=self.customer_id,
                lines=(OrderLineInput(inventory_item_id=self.item_id, quantity=2),),
            ))

        numbers = []
        errors = []
        lock = threading.Lock()

        def worker():
            with self.app.app_context():
                try:
                    payment = payment_service.record_payment(RecordPaymentRequest(
                        customer_id=self.customer_id,
                        amount_cents=1000,
                        payment_method="CASH",
                    ))
                    with lock:
                        numbers.append(payment.payment_number)
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                finally:
                    db.session.remove()

        self._run(worker, 5)

        with self.app.app_context():
            self.assertFalse(errors)
            self.assertEqual(len(numbers), len(set(numbers)))
            self.assertEqual(db.session.query(Payment).count(), 5)

            order = db.session.query(Order).one()
            self.assertEqual(order.amount_paid_cents, 2000)
            self.assertEqual(order.payment_status, "PAID")

            # 5000 paid against 1000 old balance, order fully settled
            snapshot = balance_service.compute_wallet(self.customer_id)
            self.assertEqual(snapshot.wallet_cents, 4000)
            self.assertEqual(db.session.get(Customer, self.customer_id).balance_cents, 4000)
            self.assertEqual(balance_service.audit_wallets(), [])


if __name__ == "__main__":
    unittest.main()
