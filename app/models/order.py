"""Order model."""
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base, generate_uuid


class OrderStatus(enum.Enum):
    """Order status. Checkout only ever creates PENDING."""
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'

    @property
    def label(self):
        return STATUS_LABELS[self]


STATUS_LABELS = {
    OrderStatus.PENDING: 'En attente',
    OrderStatus.CONFIRMED: 'Confirmée',
    OrderStatus.DELIVERED: 'Livrée',
    OrderStatus.CANCELLED: 'Annulée',
}


def _utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    """Order placed by a parent for a school."""

    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    school_id = Column(String(36), ForeignKey('schools.id'), nullable=True, index=True)
    parent_id = Column(String(36), ForeignKey('profiles.id'), nullable=False, index=True)
    parent_name = Column(String(200), nullable=True)
    parent_email = Column(String(255), nullable=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    margin_amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    # Relationships
    items = relationship('OrderItem', back_populates='order')

    @property
    def status_label(self):
        """French display label, falling back to the raw value."""
        try:
            return OrderStatus(self.status).label
        except ValueError:
            return self.status

    def __repr__(self):
        return f"<Order(id={self.id}, total={self.total_amount}, status={self.status})>"
