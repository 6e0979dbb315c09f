"""
Unit tests for the row store.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.exc import OperationalError

from app.exceptions import RemoteReadError, RemoteWriteError, ValidationError
from app.models import Order, Product
from app.services.row_store import RowStore


class FlakySession:
    """Session whose first queries fail like a timed-out connection."""

    def __init__(self, session, failures):
        self.session = session
        self.failures = failures
        self.calls = 0

    def query(self, *args, **kwargs):
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise OperationalError('SELECT 1', {}, Exception('canceling statement due to statement timeout'))
        return self.session.query(*args, **kwargs)

    def rollback(self):
        self.session.rollback()


class TestQuery:

    def test_filter_in_and_order(self, store, campaign):
        store.insert('products', [
            {'name': 'B', 'price': Decimal('2.00'), 'campaign_id': campaign.id},
            {'name': 'A', 'price': Decimal('1.00'), 'campaign_id': campaign.id},
            {'name': 'C', 'price': Decimal('3.00'), 'campaign_id': campaign.id},
        ])

        rows = store.query('products', {'name': ['A', 'C']}, order_by='-name')
        assert [p.name for p in rows] == ['C', 'A']

        rows = store.query('products', order_by='price')
        assert [p.name for p in rows] == ['A', 'B', 'C']

    def test_range_filter(self, store, parent):
        now = datetime.now(timezone.utc)
        store.insert('orders', [
            {'parent_id': parent.id, 'total_amount': Decimal('1'), 'created_at': now - timedelta(days=40)},
            {'parent_id': parent.id, 'total_amount': Decimal('2'), 'created_at': now - timedelta(days=2)},
        ])

        rows = store.query('orders', {'created_at__gte': now - timedelta(days=7)})
        assert [o.total_amount for o in rows] == [Decimal('2')]

        rows = store.query('orders', {'created_at__lte': now - timedelta(days=7)})
        assert [o.total_amount for o in rows] == [Decimal('1')]

    def test_empty_in_matches_nothing(self, store, product_a):
        assert store.query('products', {'id': []}) == []

    def test_get(self, store, product_a):
        assert store.get('products', product_a.id).name == product_a.name
        assert store.get('products', 'missing') is None

    def test_unknown_table_or_column(self, store):
        with pytest.raises(ValidationError):
            store.query('invoices')
        with pytest.raises(ValidationError):
            store.query('products', {'sku': 'X'})
        with pytest.raises(ValidationError):
            store.query('products', {'price__between': 1})

    def test_read_retried_on_operational_error(self, session, product_a):
        flaky = FlakySession(session, failures=2)
        store = RowStore(flaky, read_retries=2)

        rows = store.query('products')
        assert [p.id for p in rows] == [product_a.id]
        assert flaky.calls == 3

    def test_read_gives_up_after_retries(self, session):
        flaky = FlakySession(session, failures=5)
        store = RowStore(flaky, read_retries=1)

        with pytest.raises(RemoteReadError):
            store.query('products')
        assert flaky.calls == 2


class TestWrites:

    def test_insert_returns_rows_with_ids(self, store, campaign):
        rows = store.insert('products', [{'name': 'A', 'price': Decimal('1.00')}])
        assert rows[0].id is not None
        assert store.get('products', rows[0].id) is not None

    def test_insert_nothing(self, store):
        assert store.insert('products', []) == []

    def test_insert_failure_is_remote_write_error(self, store, session, parent, product_a):
        row = {'user_id': parent.id, 'product_id': product_a.id, 'quantity': 1}
        store.insert('cart_items', [row])

        with pytest.raises(RemoteWriteError):
            store.insert('cart_items', [row])
        # Session is usable again after the rollback
        assert len(store.query('cart_items')) == 1

    def test_insert_unknown_column(self, store):
        with pytest.raises(ValidationError):
            store.insert('products', [{'name': 'A', 'price': 1, 'colour': 'red'}])

    def test_update_and_delete_return_counts(self, store, product_a, product_b):
        assert store.update('products', {'id': product_a.id}, {'is_available': False}) == 1
        assert store.get('products', product_a.id).is_available is False

        assert store.delete('products', {'id': [product_a.id, product_b.id]}) == 2
        assert store.query('products') == []

    def test_delete_requires_filter(self, store, product_a):
        with pytest.raises(ValidationError):
            store.delete('products', {})
        assert len(store.query('products')) == 1

    def test_update_failure_is_remote_write_error(self, store, session, parent, product_a):
        store.insert('cart_items', [{'user_id': parent.id, 'product_id': product_a.id, 'quantity': 1}])

        with pytest.raises(RemoteWriteError):
            store.update('cart_items', {'user_id': parent.id}, {'quantity': 0})
        assert store.query('cart_items')[0].quantity == 1
