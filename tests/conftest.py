import pytest
from decimal import Decimal

from app import create_app
from app.database import get_session, create_schema, drop_schema
from app.exceptions import RemoteWriteError
from app.models import Campaign, Store, School, Profile, Product, UserRole
from app.services.row_store import RowStore


def _persist(session, obj):
    """Commit obj and detach it fully loaded, so later commits/teardowns don't expire it."""
    session.add(obj)
    session.commit()
    session.refresh(obj)
    session.expunge(obj)
    return obj


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite)."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(scope='function')
def session(app):
    """Fresh schema and database session for each test."""
    create_schema()
    session = get_session()
    yield session
    session.rollback()
    session.remove()
    drop_schema()


@pytest.fixture(scope='function')
def client(app, session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def store(session):
    """Row store over the test session."""
    return RowStore(session, read_retries=0)


@pytest.fixture(scope='function')
def failing_store(session):
    """
    Row store factory whose writes fail for chosen (operation, table) pairs.

    Usage: failing_store(('insert', 'order_items'))
    """
    class FailingRowStore(RowStore):
        def __init__(self, fail_on):
            super().__init__(session, read_retries=0)
            self.fail_on = set(fail_on)

        def insert(self, table, rows):
            if ('insert', table) in self.fail_on:
                raise RemoteWriteError(payload={'table': table})
            return super().insert(table, rows)

        def delete(self, table, filters):
            if ('delete', table) in self.fail_on:
                raise RemoteWriteError(payload={'table': table})
            return super().delete(table, filters)

    def factory(*fail_on):
        return FailingRowStore(fail_on)
    return factory


@pytest.fixture(scope='function')
def campaign(session):
    """Campaign with the usual 20% margin."""
    return _persist(session, Campaign(name='Campagne de Noël', margin_percentage=Decimal('20')))


@pytest.fixture(scope='function')
def partner_store(session):
    return _persist(session, Store(name='Jeff de Bruges Lyon', city='Lyon'))


@pytest.fixture(scope='function')
def other_store(session):
    return _persist(session, Store(name='Jeff de Bruges Nantes', city='Nantes'))


@pytest.fixture(scope='function')
def school(session, partner_store):
    return _persist(session, School(
        name='École Victor Hugo',
        store_id=partner_store.id,
        margin_explanation='20% reversés à la coopérative scolaire.'
    ))


@pytest.fixture(scope='function')
def other_school(session, other_store):
    return _persist(session, School(name='École Jean Moulin', store_id=other_store.id))


@pytest.fixture(scope='function')
def parent(session, school):
    """Buyer attached to school."""
    return _persist(session, Profile(
        name='Claire Martin',
        email='claire@example.com',
        role=UserRole.PARENT.value,
        school_id=school.id
    ))


@pytest.fixture(scope='function')
def other_parent(session, other_school):
    return _persist(session, Profile(
        name='Paul Durand',
        email='paul@example.com',
        role=UserRole.PARENT.value,
        school_id=other_school.id
    ))


@pytest.fixture(scope='function')
def school_profile(session, school):
    return _persist(session, Profile(
        name='Direction Victor Hugo',
        email='ecole@example.com',
        role=UserRole.ECOLE.value,
        school_id=school.id
    ))


@pytest.fixture(scope='function')
def store_profile(session, partner_store):
    return _persist(session, Profile(
        name='Magasin Lyon',
        email='magasin@example.com',
        role=UserRole.MAGASIN.value,
        store_id=partner_store.id
    ))


@pytest.fixture(scope='function')
def siege_profile(session):
    return _persist(session, Profile(
        name='Siège',
        email='siege@example.com',
        role=UserRole.SIEGE.value
    ))


@pytest.fixture(scope='function')
def product_a(session, campaign):
    return _persist(session, Product(name='Oursons Guimauve', price=Decimal('5.00'), campaign_id=campaign.id))


@pytest.fixture(scope='function')
def product_b(session, campaign):
    return _persist(session, Product(name='Tablette Noir 70%', price=Decimal('3.50'), campaign_id=campaign.id))


@pytest.fixture(scope='function')
def unavailable_product(session, campaign):
    return _persist(session, Product(
        name="Calendrier de l'Avent",
        price=Decimal('12.00'),
        campaign_id=campaign.id,
        is_available=False
    ))


@pytest.fixture(scope='function')
def login(client):
    """Log a profile in, the way the hosted auth provider does."""
    def _login(profile):
        # Read the id before session_transaction(): its context teardown closes the DB session
        profile_id = profile.id
        with client.session_transaction() as sess:
            sess['user_id'] = profile_id
        return client
    return _login
