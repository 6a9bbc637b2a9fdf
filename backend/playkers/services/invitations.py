from datetime import timedelta

from flask import current_app

from playkers import db
from playkers.models import Invitation, Player, is_valid_email, INVITATION_TYPES, utcnow
from playkers.services.players import player_for_user


class InvitationError(ValueError):
    """Invitation cannot be issued or redeemed. ``status`` is the HTTP code."""

    def __init__(self, message, status=400):
        super().__init__(message)
        self.status = status


def invitation_link(invitation):
    base = current_app.config.get('PUBLIC_BASE_URL', '').rstrip('/')
    return f'{base}/accept-invite/{invitation.token}'


def serialize(invitation):
    payload = invitation.to_dict()
    payload['invitationLink'] = invitation_link(invitation)
    return payload


def issue_invitation(data, inviter):
    data = data or {}
    email = (data.get('email') or '').strip()
    if not is_valid_email(email):
        raise InvitationError('Valid email is required')
    kind = data.get('invitationType')
    if kind not in INVITATION_TYPES:
        raise InvitationError('invitationType must be match or team')
    if data.get('matchType') and data['matchType'] not in ('Friendly', 'League'):
        raise InvitationError('matchType must be Friendly or League')
    if kind == 'match' and not (data.get('matchId') or data.get('matchType')):
        raise InvitationError('Match details required for match invitations')
    if kind == 'team' and not data.get('teamId'):
        raise InvitationError('Team ID required for team invitations')

    ttl_days = int(current_app.config.get('INVITATION_TTL_DAYS', 7))
    invitation = Invitation(
        email=email,
        inviter_name=inviter.display_name,
        inviter_id=inviter.id,
        invitation_type=kind,
        match_type=data.get('matchType'),
        match_id=data.get('matchId'),
        team_id=data.get('teamId'),
        match_title=data.get('matchTitle'),
        team_name=data.get('teamName'),
        message=data.get('message'),
        expires_at=utcnow() + timedelta(days=ttl_days),
    )
    db.session.add(invitation)
    db.session.commit()
    current_app.logger.info(f"[invite] id={invitation.id} type={kind} to={email} by={inviter.id}")
    return invitation


def find_invitations(inviter_id=None, email=None, match_id=None, team_id=None, status=None):
    query = Invitation.query
    for column, value in (('inviter_id', inviter_id), ('email', email), ('match_id', match_id),
                          ('team_id', team_id), ('status', status)):
        if value:
            query = query.filter(getattr(Invitation, column) == value)
    return query.order_by(Invitation.created_at.desc()).all()


def _expire(invitation):
    invitation.status = 'expired'
    db.session.add(invitation)
    db.session.commit()


def lookup_by_token(token):
    """Return the invitation for ``token``; past-due pending ones expire here."""
    invitation = Invitation.query.filter_by(token=token).first()
    if invitation is None:
        raise InvitationError('Invitation not found', 404)
    if invitation.status == 'pending' and invitation.is_expired:
        _expire(invitation)
        raise InvitationError('Invitation has expired', 410)
    return invitation


def accept_invitation(token, user=None, guest=None):
    """Redeem ``token`` once. Only a pending, unexpired invitation transitions."""
    invitation = Invitation.query.filter_by(token=token).first()
    if invitation is None:
        raise InvitationError('Invitation not found', 404)
    if invitation.status != 'pending':
        raise InvitationError(f'Invitation is {invitation.status}')
    if invitation.is_expired:
        _expire(invitation)
        raise InvitationError('Invitation has expired', 410)

    if guest is not None and not isinstance(guest, dict):
        raise InvitationError('guestPlayerData must be an object')

    player = None
    if guest:
        name = (guest.get('name') or '').strip()
        guest_email = (guest.get('email') or '').strip()
        if not name:
            raise InvitationError('Name is required')
        if not is_valid_email(guest_email):
            raise InvitationError('Valid email is required')
        player = Player(name=name, email=guest_email, is_guest=True, team_id=invitation.team_id)
        db.session.add(player)
        db.session.flush()
    elif user is not None:
        player = player_for_user(user, team_id=invitation.team_id)

    invitation.status = 'accepted'
    invitation.accepted_at = utcnow()
    invitation.accepted_by_user_id = user.id if user is not None else None
    invitation.accepted_by_player_id = player.id if player else None
    db.session.add(invitation)
    db.session.commit()
    current_app.logger.info(f"[invite-accept] id={invitation.id} player={invitation.accepted_by_player_id}")
    return invitation


def revoke_invitation(invitation_id, user):
    invitation = db.session.get(Invitation, invitation_id)
    if invitation is None:
        raise InvitationError('Invitation not found', 404)
    if invitation.inviter_id != user.id:
        raise InvitationError('You can only revoke your own invitations', 403)
    invitation.status = 'revoked'
    db.session.add(invitation)
    db.session.commit()
    return invitation


def expire_overdue_invitations():
    overdue = Invitation.query.filter(Invitation.status == 'pending', Invitation.expires_at < utcnow()).all()
    for invitation in overdue:
        invitation.status = 'expired'
    db.session.commit()
    return len(overdue)
