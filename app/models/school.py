"""School model."""
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, generate_uuid


class School(Base):
    """
    School running a shop page for its parents.

    ``custom_message`` and ``margin_explanation`` are shown on the shop and
    cart pages. Checkout only reads this table.
    """

    __tablename__ = 'schools'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    store_id = Column(String(36), ForeignKey('stores.id'), nullable=True, index=True)
    custom_message = Column(Text, nullable=True)
    margin_explanation = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    store = relationship('Store', back_populates='schools')

    def __repr__(self):
        return f"<School(id={self.id}, name='{self.name}', store_id={self.store_id})>"
