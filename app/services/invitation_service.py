"""
Invitation service - schools invite parents to their shop.

The invitation code goes into the sign-up link handled by the hosted auth
provider; accepting an invitation happens there.
"""
import logging
import re
import secrets
from typing import List, Tuple

from app.exceptions import DuplicateInvitationError, NotFoundError, UnauthorizedError, ValidationError
from app.models import InvitationStatus, ParentInvitation, Profile, UserRole
from app.services.row_store import RowStore

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def normalize_invitee(parent_name, parent_email) -> Tuple[str, str]:
    """Trim the name, lowercase the email and validate both."""
    name = parent_name.strip() if isinstance(parent_name, str) else ''
    email = parent_email.strip().lower() if isinstance(parent_email, str) else ''

    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f'Le nom doit contenir entre {NAME_MIN_LENGTH} et {NAME_MAX_LENGTH} caractères.',
            payload={'field': 'parent_name'}
        )
    if len(email) > EMAIL_MAX_LENGTH or not _EMAIL_RE.match(email):
        raise ValidationError('Email invalide.', payload={'field': 'parent_email'})
    return name, email


def generate_invitation_code() -> str:
    return secrets.token_urlsafe(16)


def create_invitation(store: RowStore, inviter: Profile, parent_name, parent_email) -> ParentInvitation:
    """
    Record a pending invitation from the inviter's school.

    Only one pending invitation per (school, email) may exist.
    """
    if inviter is None or inviter.role != UserRole.ECOLE.value:
        raise UnauthorizedError('Seules les écoles peuvent inviter des parents.')
    if not inviter.school_id:
        raise NotFoundError('Aucune école associée à ce compte.')

    name, email = normalize_invitee(parent_name, parent_email)

    pending = store.query('parent_invitations', {
        'school_id': inviter.school_id,
        'parent_email': email,
        'status': InvitationStatus.PENDING.value,
    })
    if pending:
        raise DuplicateInvitationError(email)

    invitation = store.insert('parent_invitations', [{
        'school_id': inviter.school_id,
        'invited_by': inviter.id,
        'parent_name': name,
        'parent_email': email,
        'invitation_code': generate_invitation_code(),
        'status': InvitationStatus.PENDING.value,
    }])[0]
    logger.info(f"[INVITE] School {inviter.school_id} invited {email} ({invitation.id})")
    return invitation


def list_invitations(store: RowStore, profile: Profile) -> List[ParentInvitation]:
    """Invitations of the profile's school, newest first."""
    if profile is None or profile.role != UserRole.ECOLE.value:
        raise UnauthorizedError('Seules les écoles peuvent consulter les invitations.')
    if not profile.school_id:
        raise NotFoundError('Aucune école associée à ce compte.')
    return store.query('parent_invitations', {'school_id': profile.school_id}, order_by='-created_at')
