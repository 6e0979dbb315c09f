"""
Integration tests for parent invitations sent by schools.
"""

from app.models import ParentInvitation


def test_school_invites_parent(login, session, school_profile, school):
    client = login(school_profile)

    resp = client.post('/invitations', json={'parent_name': 'Marie Dupont', 'parent_email': 'marie@example.com'})
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['email_sent'] is True
    assert data['invitation']['status'] == 'pending'
    assert data['invitation']['school_id'] == school.id

    listing = client.get('/invitations').get_json()['invitations']
    assert [i['parent_email'] for i in listing] == ['marie@example.com']


def test_duplicate_invitation(login, session, school_profile):
    client = login(school_profile)
    payload = {'parent_name': 'Marie Dupont', 'parent_email': 'marie@example.com'}

    assert client.post('/invitations', json=payload).status_code == 201
    resp = client.post('/invitations', json=payload)

    assert resp.status_code == 409
    assert resp.get_json()['parent_email'] == 'marie@example.com'
    assert session.query(ParentInvitation).count() == 1


def test_invalid_invitation(login, session, school_profile):
    client = login(school_profile)

    assert client.post('/invitations', json={'parent_name': 'M', 'parent_email': 'marie@example.com'}).status_code == 400
    assert client.post('/invitations', json={'parent_name': 'Marie', 'parent_email': 'marie'}).status_code == 400
    assert client.post('/invitations', data='oops').status_code == 400
    assert session.query(ParentInvitation).count() == 0


def test_only_schools_can_invite(login, parent, store_profile, siege_profile):
    for profile in (parent, store_profile, siege_profile):
        client = login(profile)
        assert client.post('/invitations', json={'parent_name': 'Marie', 'parent_email': 'm@example.com'}).status_code == 403
        assert client.get('/invitations').status_code == 403
