"""
Unit tests for SQLAlchemy models.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from app.models import CartItem, Order, OrderStatus, Product, Profile, UserRole


class TestProductModel:
    """Tests for Product model."""

    def test_create_product(self, session, campaign):
        """Test creating a product."""
        product = Product(name='Ballotin 250g', price=Decimal('15.90'), campaign_id=campaign.id)
        session.add(product)
        session.commit()

        assert product.id is not None
        assert len(product.id) == 36
        assert product.is_available is True
        assert product.price == Decimal('15.90')


class TestCartItemModel:
    """Tests for CartItem model."""

    def test_one_line_per_user_and_product(self, session, parent, product_a):
        """Test that a (user, product) pair can only have one line."""
        session.add(CartItem(user_id=parent.id, product_id=product_a.id, quantity=1))
        session.commit()

        session.add(CartItem(user_id=parent.id, product_id=product_a.id, quantity=2))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_quantity_must_be_positive(self, session, parent, product_a):
        """Test that a zero quantity line cannot be stored."""
        session.add(CartItem(user_id=parent.id, product_id=product_a.id, quantity=0))
        with pytest.raises(IntegrityError):
            session.commit()


class TestOrderModel:
    """Tests for Order model."""

    def test_defaults(self, session, parent):
        order = Order(parent_id=parent.id, total_amount=Decimal('10.00'))
        session.add(order)
        session.commit()

        assert order.status == OrderStatus.PENDING.value
        assert order.created_at is not None
        assert order.margin_amount == Decimal('0')

    @pytest.mark.parametrize('status,label', [
        ('pending', 'En attente'),
        ('confirmed', 'Confirmée'),
        ('delivered', 'Livrée'),
        ('cancelled', 'Annulée'),
        ('refunded', 'refunded'),
    ])
    def test_status_label(self, status, label):
        assert Order(status=status).status_label == label


class TestProfileModel:

    def test_is_parent(self):
        assert Profile(role=UserRole.PARENT.value).is_parent() is True
        assert Profile(role=UserRole.ECOLE.value).is_parent() is False
