"""Parent invitation model."""
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base, generate_uuid


class InvitationStatus(enum.Enum):
    """Invitation status. Schools only ever create PENDING."""
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    EXPIRED = 'expired'

    @property
    def label(self):
        return INVITATION_LABELS[self]


INVITATION_LABELS = {
    InvitationStatus.PENDING: 'En attente',
    InvitationStatus.ACCEPTED: 'Acceptée',
    InvitationStatus.EXPIRED: 'Expirée',
}


class ParentInvitation(Base):
    """Invitation sent by a school to a parent."""

    __tablename__ = 'parent_invitations'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    school_id = Column(String(36), ForeignKey('schools.id'), nullable=False, index=True)
    invited_by = Column(String(36), ForeignKey('profiles.id'), nullable=False)
    parent_name = Column(String(100), nullable=False)
    parent_email = Column(String(255), nullable=False, index=True)
    invitation_code = Column(String(64), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default=InvitationStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    @property
    def status_label(self):
        try:
            return InvitationStatus(self.status).label
        except ValueError:
            return self.status

    def __repr__(self):
        return f"<ParentInvitation(id={self.id}, email='{self.parent_email}', status={self.status})>"
