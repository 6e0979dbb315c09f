"""Campaign model."""
from sqlalchemy import Column, String, Text, Boolean, Numeric, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, generate_uuid


class Campaign(Base):
    """Fundraising campaign run by the head office."""

    __tablename__ = 'campaigns'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    # School share of each order, in percent (20 = 20%)
    margin_percentage = Column(Numeric(5, 2), nullable=True, default=20)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    products = relationship('Product', back_populates='campaign')

    def __repr__(self):
        return f"<Campaign(id={self.id}, name='{self.name}', margin={self.margin_percentage})>"
