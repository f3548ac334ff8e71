import pytest
from datetime import date
import uuid

from app import create_app
from app.database import Base, create_all, drop_all, get_session
from app.models import AppUser, Shop, Product, UserRole
from app.services.batch_service import create_batch, generate_batch_units, get_batch_units

TEST_BASE_URL = 'https://warranty.test'


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (SQLite, see config.TestConfig)."""
    app = create_app('config.TestConfig')
    app.config['PUBLIC_BASE_URL'] = TEST_BASE_URL
    drop_all()
    create_all()
    yield app
    get_session().remove()
    drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session for testing. Every table is emptied afterwards."""
    session = get_session()
    yield session
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.remove()


@pytest.fixture(scope='function')
def shop(session):
    suffix = str(uuid.uuid4())[:8]
    shop = Shop(
        name=f'Test Shop {suffix}',
        address='Av. Siempre Viva 742',
        phone='555-0100',
        email=f'shop-{suffix}@test.com',
        owner_name='Shop Owner'
    )
    session.add(shop)
    session.commit()
    return shop


def _make_user(session, role, shop_id=None):
    suffix = str(uuid.uuid4())[:8]
    user = AppUser(
        email=f'{role}-{suffix}@test.com',
        full_name=f'{role} user',
        role=role,
        shop_id=shop_id,
        active=True
    )
    user.set_password('password123')
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(session):
    return _make_user(session, UserRole.ADMIN.value)


@pytest.fixture(scope='function')
def shop_owner(session, shop):
    return _make_user(session, UserRole.SHOP_OWNER.value, shop.id)


@pytest.fixture(scope='function')
def inventory_user(session, shop):
    return _make_user(session, UserRole.INVENTORY_USER.value, shop.id)


@pytest.fixture(scope='function')
def middleman(session):
    return _make_user(session, UserRole.MIDDLEMAN.value)


@pytest.fixture(scope='function')
def product(session, admin_user):
    """12-month warranty product."""
    product = Product(
        name='Smart TV 55"',
        description='4K television',
        category='Electronics',
        brand='Acme',
        model='TV-55X',
        warranty_duration_months=12,
        specifications={'screen': '55 inch'},
        active=True,
        created_by=admin_user.id
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def batch(session, product):
    """Batch of 3 units, not generated yet (status created)."""
    return create_batch(
        session,
        product_id=product.id,
        batch_number=f'B-{str(uuid.uuid4())[:8]}',
        quantity=3,
        manufacturing_date=date(2024, 1, 1)
    )


@pytest.fixture(scope='function')
def units(session, batch):
    """The batch's 3 units; generating them moves the batch to printed."""
    generate_batch_units(session, batch.id, base_url=TEST_BASE_URL)
    units = get_batch_units(session, batch.id)
    session.commit()
    return units


def login(client, user):
    with client.session_transaction() as sess:
        sess['user_id'] = user.id
    return client


@pytest.fixture(scope='function')
def admin_client(client, admin_user):
    """Client logged in as a platform admin."""
    return login(client, admin_user)


@pytest.fixture(scope='function')
def owner_client(client, shop_owner):
    return login(client, shop_owner)


@pytest.fixture(scope='function')
def inventory_client(client, inventory_user):
    return login(client, inventory_user)


@pytest.fixture(scope='function')
def middleman_client(client, middleman):
    return login(client, middleman)
