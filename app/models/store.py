"""Store model - partner shop of the network."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, generate_uuid


class Store(Base):
    """Partner store (magasin) managing a set of schools."""

    __tablename__ = 'stores'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    city = Column(String(120), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    schools = relationship('School', back_populates='store')

    def __repr__(self):
        return f"<Store(id={self.id}, name='{self.name}')>"
