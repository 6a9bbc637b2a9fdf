"""Notification records and the accept/decline side effects around them.

Status is a flat string: any of read/accepted/declined may follow any prior
status. Reply notifications to the original sender are best-effort; their
failure is logged and never undoes the primary write.
"""

from flask import current_app

from playkers import db
from playkers.models import Booking, Notification, Player, User, Venue, is_valid_email, NOTIFICATION_TYPES, utcnow
from playkers.services.players import player_for_user

SETTABLE_STATUSES = ('read', 'accepted', 'declined')

_FIELD_MAP = {
    'recipientUserId': 'recipient_user_id',
    'recipientPlayerId': 'recipient_player_id',
    'recipientEmail': 'recipient_email',
    'senderName': 'sender_name',
    'senderEmail': 'sender_email',
    'senderPhone': 'sender_phone',
    'type': 'type',
    'bookingId': 'booking_id',
    'matchType': 'match_type',
    'location': 'location',
    'senderPlace': 'sender_place',
    'preferredTiming': 'preferred_timing',
    'team1Id': 'team1_id',
    'team2Id': 'team2_id',
    'message': 'message',
    'sport': 'sport',
}


class NotificationError(ValueError):
    pass


def create_notification(data):
    """Validate ``data`` (API field names) and insert an unread notification."""
    data = dict(data or {})
    data.setdefault('type', 'match_request')
    if not data.get('senderName'):
        raise NotificationError('Sender name is required')
    if not is_valid_email(data.get('senderEmail') or ''):
        raise NotificationError('Valid email is required')
    if not data.get('senderPhone'):
        raise NotificationError('Phone number is required')
    if data['type'] not in NOTIFICATION_TYPES:
        raise NotificationError(f'type must be one of {", ".join(NOTIFICATION_TYPES)}')
    if data.get('recipientEmail') and not is_valid_email(data['recipientEmail']):
        raise NotificationError('recipientEmail must be a valid email')

    # Player recipients reach the user their profile is linked to
    if not data.get('recipientUserId') and data.get('recipientPlayerId'):
        player = db.session.get(Player, data['recipientPlayerId'])
        data['recipientUserId'] = player.user_id if player else None

    notification = Notification(**{column: data.get(field) for field, column in _FIELD_MAP.items()})
    notification.status = 'unread'
    db.session.add(notification)
    db.session.commit()
    current_app.logger.info(
        f"[notify] id={notification.id} type={notification.type} recipient={notification.recipient_user_id}"
    )
    return notification


def list_notifications(user_id, status=None):
    query = Notification.query.filter_by(recipient_user_id=user_id)
    if status:
        query = query.filter_by(status=status)
    return query.order_by(Notification.created_at.desc()).all()


def unread_count(user_id):
    return Notification.query.filter_by(recipient_user_id=user_id, status='unread').count()


def get_for_recipient(notification_id, user_id):
    return Notification.query.filter_by(id=notification_id, recipient_user_id=user_id).first()


def update_status(notification, status):
    if status not in SETTABLE_STATUSES:
        raise NotificationError('Invalid status')
    notification.status = status
    notification.read_at = utcnow()
    db.session.add(notification)
    db.session.commit()
    return notification


def mark_all_read(user_id):
    now = utcnow()
    unread = Notification.query.filter_by(recipient_user_id=user_id, status='unread').all()
    for notification in unread:
        notification.status = 'read'
        notification.read_at = now
    db.session.commit()
    return len(unread)


def delete_notification(notification):
    db.session.delete(notification)
    db.session.commit()


def _reply_to_sender(notification, responder, notif_type, message, **extra):
    """Notify the sender of ``notification``; resolved as user first, then player."""
    sender_email = notification.sender_email
    if not sender_email:
        return None
    recipient_user_id = None
    recipient_player_id = None
    sender_user = User.query.filter_by(email=sender_email).first()
    if sender_user:
        recipient_user_id = sender_user.id
    else:
        player = Player.query.filter_by(email=sender_email).first()
        if player:
            recipient_player_id = player.id
    if not (recipient_user_id or recipient_player_id):
        current_app.logger.info(f"[notify-skip] no user or player for {sender_email}")
        return None
    return create_notification({
        'recipientUserId': recipient_user_id,
        'recipientPlayerId': recipient_player_id,
        'recipientEmail': sender_email,
        'senderName': responder.display_name,
        'senderEmail': responder.email,
        'senderPhone': responder.phone_number or 'Not provided',
        'type': notif_type,
        'message': message,
        **extra,
    })


def accept_request(notification, user):
    """Accept a match request and tell the sender. Returns the response body."""
    update_status(notification, 'accepted')
    try:
        sender_user = User.query.filter_by(email=notification.sender_email).first()
        # Senders need a player profile to be reachable later
        if sender_user and not Player.query.filter_by(email=notification.sender_email).first():
            player_for_user(sender_user)
        _reply_to_sender(
            notification, user, 'match_request',
            f'{user.display_name} accepted your match request! Please contact them to finalize the details.',
            matchType=notification.match_type, location=notification.location,
        )
    except Exception as exc:
        db.session.rollback()
        current_app.logger.error(f"[notify-error] accept reply for {notification.id} failed: {exc}")

    body = notification.to_dict()
    body['matchRequestData'] = None
    if notification.type == 'match_request':
        # The accepter's team (team2 of the request) becomes team1 on their side
        body['matchRequestData'] = {
            'team1Id': notification.team2_id,
            'team2Id': notification.team1_id,
            'matchType': notification.match_type or 'Friendly',
            'sport': notification.sport or 'cricket',
        }
    return body


def decline_request(notification, user):
    update_status(notification, 'declined')
    if notification.type != 'match_request':
        return notification
    try:
        _reply_to_sender(notification, user, 'match_request', f'{user.display_name} declined your match request.')
    except Exception as exc:
        db.session.rollback()
        current_app.logger.error(f"[notify-error] decline reply for {notification.id} failed: {exc}")
    return notification


def notify_booking_accepted(booking, owner, venue):
    return create_notification({
        'recipientUserId': booking.user_id,
        'senderName': owner.display_name,
        'senderEmail': owner.email,
        'senderPhone': owner.phone_number or 'Not provided',
        'type': 'booking_accepted',
        'bookingId': booking.id,
        'location': venue.name if venue else 'Venue',
        'message': f"Your booking for {venue.name if venue else 'the venue'} has been accepted!",
    })


def accept_booking_request(notification, owner):
    """Confirm the booking behind a booking_request and notify the booker."""
    booking = db.session.get(Booking, notification.booking_id)
    if booking is None:
        return None
    booking.status = 'confirmed'
    db.session.add(booking)
    db.session.commit()
    update_status(notification, 'accepted')
    try:
        notify_booking_accepted(booking, owner, db.session.get(Venue, booking.venue_id))
    except Exception as exc:
        db.session.rollback()
        current_app.logger.error(f"[notify-error] booking_accepted for {booking.id} failed: {exc}")
    return booking
