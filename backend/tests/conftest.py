"""
Pytest fixtures for RepairDesk backend tests.

Provides the application with an in-memory database, a fresh schema per
test, and two independent stores (tenants) each staffed with one employee
per role.
"""

import pytest

from repairdesk import create_app
from repairdesk.extensions import db
from repairdesk.models import Category, Employee, Owner, StockItem, Store, Ticket
from repairdesk.services.auth_service import hash_pin
from repairdesk.services.session_service import create_session
from repairdesk.services.tenant_service import TenantContext


ROLE_PINS = {
    "OWNER": "1111",
    "MANAGER": "2222",
    "TECHNICIAN": "3333",
    "CASHIER": "4444",
    "VIEWER": "5555",
}


class Tenant:
    """A store plus one employee per role, with context/token helpers."""

    def __init__(self, store: Store, staff: dict[str, Employee]):
        self.store = store
        self.staff = staff

    @property
    def id(self) -> int:
        return self.store.id

    def ctx(self, role: str) -> TenantContext:
        employee = self.staff[role]
        return TenantContext(actor_id=employee.id, store_id=self.store.id, role=role)

    def token(self, role: str) -> str:
        _, token = create_session(self.staff[role])
        db.session.commit()
        return token

    def headers(self, role: str) -> dict:
        return auth_headers(self.token(role))


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def build_tenant(name: str, email: str) -> Tenant:
    owner = Owner(email=email, password_hash=hash_pin(ROLE_PINS["OWNER"]))
    db.session.add(owner)
    db.session.flush()

    store = Store(owner_id=owner.id, name=name, store_email=email, timezone="America/Chicago")
    db.session.add(store)
    db.session.flush()

    staff = {}
    for role, pin in ROLE_PINS.items():
        employee = Employee(
            store_id=store.id,
            name=f"{name} {role.title()}",
            pin_hash=hash_pin(pin),
            role=role,
        )
        db.session.add(employee)
        staff[role] = employee

    db.session.commit()
    return Tenant(store, staff)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table before each test."""
    app.config['INVENTORY_ALLOW_NEGATIVE_STOCK'] = True

    db.session.rollback()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def tenant_a(db_session):
    """Store A (first tenant) with one employee per role."""
    return build_tenant("Store A", "store-a@example.com")


@pytest.fixture(scope='function')
def tenant_b(db_session):
    """Store B (second tenant) with one employee per role."""
    return build_tenant("Store B", "store-b@example.com")


@pytest.fixture(scope='function')
def category_a(db_session, tenant_a):
    category = Category(store_id=tenant_a.id, name="Screens")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def item_a(db_session, tenant_a, category_a):
    """Stock item in store A with an opening balance of 10."""
    item = StockItem(
        store_id=tenant_a.id,
        category_id=category_a.id,
        sku="SCR-001",
        name="iPhone 12 Screen",
        initial_quantity=10,
        quantity_on_hand=10,
        reorder_point=3,
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def item_b(db_session, tenant_b):
    category = Category(store_id=tenant_b.id, name="Batteries")
    db_session.add(category)
    db_session.flush()
    item = StockItem(
        store_id=tenant_b.id,
        category_id=category.id,
        sku="BAT-001",
        name="Pixel Battery",
        initial_quantity=5,
        quantity_on_hand=5,
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def ticket_a(db_session, tenant_a):
    ticket = Ticket(store_id=tenant_a.id, title="Cracked screen", status="RECEIVED")
    db_session.add(ticket)
    db_session.commit()
    return ticket


@pytest.fixture(scope='function')
def ticket_b(db_session, tenant_b):
    ticket = Ticket(store_id=tenant_b.id, title="Water damage", status="RECEIVED")
    db_session.add(ticket)
    db_session.commit()
    return ticket
