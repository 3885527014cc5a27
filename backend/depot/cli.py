# backend/depot/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema / demo data:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed [--customers 8] [--seed 42]
#   Create demo customers, stock, orders, payments, expenses and tax records.
#
# Ledger maintenance:
# - python -m flask ledger recompute-wallets
#   Recompute every customer wallet from orders and payments.
# - python -m flask ledger audit-wallets
#   List customers whose stored wallet differs from the recomputed value (read-only).
# - python -m flask ledger sync-old-balance
#   Reset old_balance_remaining to old_balance for every customer.

import random
from datetime import timedelta

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Customer
from .schemas import (
    CreateCustomerRequest,
    CreateExpenseRequest,
    CreateItemRequest,
    CreateOrderRequest,
    CreateTaxRequest,
    OrderLineInput,
    RecordPaymentRequest,
)
from .services import balance_service, customer_service, expense_service, inventory_service, order_service, payment_service, tax_service
from .services.errors import InsufficientStockError
from .time_utils import utcnow


SEED_PRODUCTS = [
    ("RICE", "BAG", "Long Grain Parboiled Rice", "Royal Stallion", 4_200_000),
    ("RICE", "BAG", "Thai Jasmine Rice", "Golden Phoenix", 4_500_000),
    ("SPAGHETTI", "CARTON", "Spaghetti", "Golden Penny", 850_000),
    ("SPAGHETTI", "CARTON", "Macaroni", "Dangote", 900_000),
    ("OIL", "GALLON", "Vegetable Oil", "Kings Oil", 5_200_000),
    ("OIL", "GALLON", "Groundnut Oil", "Grand Pure", 5_800_000),
    ("BEANS", "BAG", "Brown Beans", "Best Quality", 4_200_000),
    ("INDOMIE", "CARTON", "Indomie Chicken Flavor", "Indomie", 650_000),
    ("OTHER", "BAG", "Sugar", "Dangote", 3_500_000),
]

SEED_NAMES = [
    "Chioma Okonkwo", "Adebayo Adeyemi", "Ngozi Eze", "Emeka Okafor",
    "Fatima Muhammad", "Ibrahim Sani", "Amina Bello", "Tunde Nwosu",
    "Blessing Obi", "Yusuf Garba", "Zainab Usman", "Chinwe Nnadi",
]

SEED_PLACES = [("Lagos", "Lagos"), ("Kano", "Kano"), ("Ibadan", "Oyo"), ("Abuja", "FCT"), ("Enugu", "Enugu")]


@click.group('system')
def system_group():
    """Schema and demo data commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete")


@system_group.command('seed')
@click.option('--customers', 'customer_count', default=8, show_default=True, help='Number of customers')
@click.option('--seed', 'rng_seed', default=42, show_default=True, help='Random seed')
@with_appcontext
def seed(customer_count, rng_seed):
    """
    Create demo data through the ledger services.

    Every order and payment goes through the normal transactions, so the
    seeded wallets, stock levels and counters satisfy the same rules as
    live data.
    """
    rng = random.Random(rng_seed)
    click.echo("START Seeding demo data...")

    items = []
    for category, unit, name, brand, price in SEED_PRODUCTS:
        items.append(inventory_service.create_item(CreateItemRequest(
            item_name=name,
            brand=brand,
            category=category,
            unit=unit,
            unit_price_cents=price,
            location=rng.choice(["Warehouse A-01", "Warehouse A-02", "Warehouse B-01"]),
            supplier_name=f"{brand} Distribution",
            supplier_contact=f"080{rng.randint(10_000_000, 99_999_999)}",
            quantity=rng.randint(40, 200),
            reorder_level=20,
        )))
    click.echo(f"PASS Created {len(items)} inventory items")

    customers = []
    for i in range(customer_count):
        name = SEED_NAMES[i % len(SEED_NAMES)]
        city, state = rng.choice(SEED_PLACES)
        customers.append(customer_service.create_customer(CreateCustomerRequest(
            name=name,
            phone=f"0{rng.randint(700, 909)}{rng.randint(1_000_000, 9_999_999)}",
            street=f"{rng.randint(1, 200)} Market Road",
            city=city,
            state=state,
            customer_type=rng.choice(["RETAIL", "WHOLESALE", "DISTRIBUTOR", "INDIVIDUAL"]),
            old_balance_cents=rng.choice([0, 0, 5_000_000, 12_000_000]),
            credit_limit_cents=rng.choice([0, 50_000_000, 200_000_000]),
        )))
    click.echo(f"PASS Created {len(customers)} customers")

    order_count = 0
    payment_count = 0
    for customer in customers:
        for _ in range(rng.randint(1, 3)):
            picks = rng.sample(items, k=rng.randint(1, 3))
            try:
                order = order_service.create_order(CreateOrderRequest(
                    customer_id=customer.id,
                    lines=tuple(OrderLineInput(inventory_item_id=item.id, quantity=rng.randint(1, 5)) for item in picks),
                ))
            except InsufficientStockError as exc:
                click.echo(f"WARN Skipped order: {exc}")
                continue
            order_count += 1

            if rng.random() < 0.6:
                payment_service.record_payment(RecordPaymentRequest(
                    customer_id=customer.id,
                    order_id=order.id,
                    amount_cents=max(1, order.total_cents // rng.choice([1, 2, 4])),
                    payment_method=rng.choice(["CASH", "BANK_TRANSFER", "POS"]),
                ))
                payment_count += 1

        if rng.random() < 0.4:
            payment_service.record_payment(RecordPaymentRequest(
                customer_id=customer.id,
                amount_cents=rng.choice([2_000_000, 10_000_000, 30_000_000]),
                payment_method="BANK_TRANSFER",
            ))
            payment_count += 1
    click.echo(f"PASS Created {order_count} orders and {payment_count} payments")

    for category, description, amount in (
        ("FUEL", "Delivery truck diesel", 15_000_000),
        ("SALARIES", "Warehouse staff wages", 80_000_000),
        ("LOADING_OFFLOADING", "Offloading of rice consignment", 4_500_000),
    ):
        expense_service.create_expense(CreateExpenseRequest(
            category=category,
            description=description,
            amount_cents=amount,
            payment_method="CASH",
        ))

    now = utcnow()
    tax_service.create_tax_record(CreateTaxRequest(
        tax_type="VAT",
        period_year=now.year,
        period_month=now.month,
        taxable_amount_cents=100_000_000,
        tax_rate_bps=750,
        due_date=now + timedelta(days=21),
    ))
    click.echo("PASS Created expenses and tax records")
    click.echo("DONE Seed complete")


@click.group('ledger')
def ledger_group():
    """Customer ledger maintenance commands."""


@ledger_group.command('recompute-wallets')
@with_appcontext
def recompute_wallets():
    """Recompute every customer wallet from orders and payments."""
    count = balance_service.recompute_all_wallets()
    click.echo(f"PASS Recomputed wallets for {count} customers")


@ledger_group.command('audit-wallets')
@with_appcontext
def audit_wallets():
    """List wallet drift without changing anything. Exits 1 if drift is found."""
    drift = balance_service.audit_wallets()
    if not drift:
        total = db.session.query(Customer).count()
        click.echo(f"PASS All {total} customer wallets match their recomputed value")
        return

    click.echo(f"WARN {len(drift)} customers have wallet drift:")
    for row in drift:
        click.echo(
            f"  #{row['customer_id']} {row['name']}: stored={row['stored_wallet_cents']} "
            f"computed={row['computed_wallet_cents']} diff={row['difference_cents']}"
        )
    click.echo("Run `flask ledger recompute-wallets` to fix.")
    raise SystemExit(1)


@ledger_group.command('sync-old-balance')
@with_appcontext
def sync_old_balance():
    """Reset old_balance_remaining to old_balance for every customer."""
    count = balance_service.sync_old_balance_remaining()
    click.echo(f"PASS Updated {count} customers")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(ledger_group)
