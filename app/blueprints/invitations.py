"""Invitations blueprint - schools invite parents to their shop."""
from flask import Blueprint, request, jsonify, g, current_app
from app.decorators.permissions import school_only
from app.exceptions import ShopError, ValidationError
from app.services import catalog_service, invitation_service
from app.services.email_service import send_parent_invitation
from app.utils.serializers import invitation_to_dict

invitations_bp = Blueprint('invitations', __name__, url_prefix='/invitations')


@invitations_bp.route('', methods=['GET'])
@school_only
def list_invitations():
    invitations = invitation_service.list_invitations(g.store, g.profile)
    return jsonify({'invitations': [invitation_to_dict(i) for i in invitations]})


@invitations_bp.route('', methods=['POST'])
@school_only
def invite_parent():
    """Invite a parent ({"parent_name": ..., "parent_email": ...})."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Requête invalide.')

    invitation = invitation_service.create_invitation(
        g.store, g.profile, data.get('parent_name'), data.get('parent_email')
    )

    school_name = None
    try:
        school_name = catalog_service.get_school_info(g.store, invitation.school_id).name
    except ShopError as e:
        current_app.logger.warning(f"School of invitation {invitation.id} unavailable for the email: {e.message}")
    email_sent = send_parent_invitation(invitation, school_name)

    return jsonify({
        'status': 'success',
        'message': f'Une invitation a été envoyée à {invitation.parent_email}',
        'email_sent': email_sent,
        'invitation': invitation_to_dict(invitation),
    }), 201
