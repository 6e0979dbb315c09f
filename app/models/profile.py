"""Profile model - authenticated user with a role in the network."""
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base, generate_uuid


class UserRole(enum.Enum):
    """Roles of the network."""
    SIEGE = 'siege'      # head office
    MAGASIN = 'magasin'  # partner store
    ECOLE = 'ecole'      # school
    PARENT = 'parent'    # buyer


class Profile(Base):
    """Profile model (the id matches the hosted auth provider's user id)."""

    __tablename__ = 'profiles'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default=UserRole.PARENT.value)
    school_id = Column(String(36), ForeignKey('schools.id'), nullable=True, index=True)
    store_id = Column(String(36), ForeignKey('stores.id'), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Profile(id={self.id}, email='{self.email}', role='{self.role}')>"

    def is_parent(self):
        """Check if the profile can purchase."""
        return self.role == UserRole.PARENT.value
