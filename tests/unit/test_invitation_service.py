"""
Unit tests for parent invitations.
"""

import pytest

from app.exceptions import DuplicateInvitationError, NotFoundError, UnauthorizedError, ValidationError
from app.models import InvitationStatus, ParentInvitation, Profile
from app.services import invitation_service


class TestCreateInvitation:

    def test_creates_pending_invitation(self, store, session, school_profile, school):
        invitation = invitation_service.create_invitation(
            store, school_profile, '  Marie Dupont ', ' Marie.Dupont@Example.com '
        )

        saved = session.query(ParentInvitation).filter_by(id=invitation.id).one()
        assert saved.school_id == school.id
        assert saved.invited_by == school_profile.id
        assert saved.parent_name == 'Marie Dupont'
        assert saved.parent_email == 'marie.dupont@example.com'
        assert saved.status == InvitationStatus.PENDING.value
        assert saved.status_label == 'En attente'
        assert len(saved.invitation_code) >= 16

    def test_codes_are_unique(self, store, school_profile):
        first = invitation_service.create_invitation(store, school_profile, 'Marie Dupont', 'marie@example.com')
        second = invitation_service.create_invitation(store, school_profile, 'Luc Petit', 'luc@example.com')
        assert first.invitation_code != second.invitation_code

    def test_duplicate_pending_invitation_is_refused(self, store, session, school_profile):
        invitation_service.create_invitation(store, school_profile, 'Marie Dupont', 'marie@example.com')

        with pytest.raises(DuplicateInvitationError) as exc:
            invitation_service.create_invitation(store, school_profile, 'Marie D.', 'MARIE@example.com')

        assert exc.value.status_code == 409
        assert session.query(ParentInvitation).count() == 1

    def test_same_email_after_acceptance(self, store, session, school_profile):
        first = invitation_service.create_invitation(store, school_profile, 'Marie Dupont', 'marie@example.com')
        store.update('parent_invitations', {'id': first.id}, {'status': InvitationStatus.ACCEPTED.value})

        invitation_service.create_invitation(store, school_profile, 'Marie Dupont', 'marie@example.com')
        assert session.query(ParentInvitation).count() == 2

    def test_same_email_other_school(self, store, session, school_profile, other_school):
        invitation_service.create_invitation(store, school_profile, 'Marie Dupont', 'marie@example.com')
        other = Profile(name='Direction Jean Moulin', email='moulin@example.com', role='ecole', school_id=other_school.id)
        session.add(other)
        session.commit()

        invitation_service.create_invitation(store, other, 'Marie Dupont', 'marie@example.com')
        assert session.query(ParentInvitation).count() == 2

    @pytest.mark.parametrize('name', ['', ' M ', 'x' * 101, None, 42])
    def test_invalid_name(self, store, session, school_profile, name):
        with pytest.raises(ValidationError) as exc:
            invitation_service.create_invitation(store, school_profile, name, 'marie@example.com')
        assert exc.value.payload == {'field': 'parent_name'}
        assert session.query(ParentInvitation).count() == 0

    @pytest.mark.parametrize('email', ['', 'marie', 'marie@', 'marie@example', 'ma rie@example.com', None,
                                       'a' * 250 + '@example.com'])
    def test_invalid_email(self, store, school_profile, email):
        with pytest.raises(ValidationError) as exc:
            invitation_service.create_invitation(store, school_profile, 'Marie Dupont', email)
        assert exc.value.payload == {'field': 'parent_email'}

    def test_name_bounds_are_inclusive(self, store, school_profile):
        invitation_service.create_invitation(store, school_profile, 'Al', 'al@example.com')
        invitation_service.create_invitation(store, school_profile, 'x' * 100, 'x@example.com')

    def test_only_schools_invite(self, store, parent, store_profile):
        for profile in (parent, store_profile):
            with pytest.raises(UnauthorizedError):
                invitation_service.create_invitation(store, profile, 'Marie Dupont', 'marie@example.com')

    def test_school_account_without_school(self, store):
        profile = Profile(name='Orpheline', email='orpheline@example.com', role='ecole')
        with pytest.raises(NotFoundError):
            invitation_service.create_invitation(store, profile, 'Marie Dupont', 'marie@example.com')


class TestListInvitations:

    def test_lists_own_school_only(self, store, session, school_profile, other_school):
        invitation_service.create_invitation(store, school_profile, 'Marie Dupont', 'marie@example.com')
        session.add(ParentInvitation(
            school_id=other_school.id, invited_by=school_profile.id, parent_name='Autre',
            parent_email='autre@example.com', invitation_code='code-autre-ecole',
        ))
        session.commit()

        result = invitation_service.list_invitations(store, school_profile)
        assert [i.parent_email for i in result] == ['marie@example.com']

    def test_parents_cannot_list(self, store, parent):
        with pytest.raises(UnauthorizedError):
            invitation_service.list_invitations(store, parent)
