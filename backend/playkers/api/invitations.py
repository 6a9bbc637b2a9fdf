from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from playkers.services.invitations import (
    InvitationError,
    accept_invitation,
    find_invitations,
    issue_invitation,
    lookup_by_token,
    revoke_invitation,
    serialize,
)

invitations = Blueprint('invitations', __name__)


def _error(exc):
    return jsonify({'error': str(exc)}), exc.status


@invitations.route('', methods=['POST'])
@login_required
def create():
    try:
        invitation = issue_invitation(request.get_json(silent=True), current_user)
    except InvitationError as exc:
        return _error(exc)
    return jsonify({'message': 'Invitation created', 'invitation': serialize(invitation)}), 201


@invitations.route('', methods=['GET'])
@login_required
def list_invitations():
    args = request.args
    filters = {
        'match_id': args.get('matchId'),
        'team_id': args.get('teamId'),
        'status': args.get('status'),
    }
    if args.get('type') == 'received':
        found = find_invitations(email=current_user.email, **filters)
    else:
        found = find_invitations(inviter_id=current_user.id, **filters)
    return jsonify([serialize(i) for i in found])


@invitations.route('/token/<string:token>', methods=['GET'])
def get_by_token(token):
    try:
        invitation = lookup_by_token(token)
    except InvitationError as exc:
        return _error(exc)
    return jsonify(serialize(invitation))


@invitations.route('/<string:token>/accept', methods=['POST'])
def accept(token):
    data = request.get_json(silent=True) or {}
    user = current_user if current_user.is_authenticated else None
    try:
        invitation = accept_invitation(token, user=user, guest=data.get('guestPlayerData'))
    except InvitationError as exc:
        return _error(exc)
    return jsonify({'message': 'Invitation accepted', 'invitation': serialize(invitation)})


@invitations.route('/<string:invitation_id>', methods=['DELETE'])
@login_required
def revoke(invitation_id):
    try:
        invitation = revoke_invitation(invitation_id, current_user)
    except InvitationError as exc:
        return _error(exc)
    return jsonify({'message': 'Invitation revoked', 'invitation': serialize(invitation)})
