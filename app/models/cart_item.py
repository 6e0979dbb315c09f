"""Cart item model - persisted cart line of a buyer."""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.sql import func
from app.database import Base, generate_uuid


class CartItem(Base):
    """
    Cart line.

    One row per (user, product). A line whose quantity would reach zero is
    deleted instead of stored.
    """

    __tablename__ = 'cart_items'
    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
        CheckConstraint('quantity > 0', name='ck_cart_items_quantity_positive'),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('profiles.id'), nullable=False, index=True)
    # No FK on purpose: a product removed from the catalog must not break listings
    product_id = Column(String(36), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<CartItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
