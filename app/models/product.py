"""Product model."""
from sqlalchemy import Column, String, Text, Boolean, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, generate_uuid


class Product(Base):
    """Product of a campaign catalog."""

    __tablename__ = 'products'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=True, index=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    campaign = relationship('Campaign', back_populates='products')

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
