from datetime import datetime

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from playkers import db
from playkers.models import Booking, Venue, BOOKING_STATUSES
from playkers.services.notifications import create_notification, notify_booking_accepted

bookings = Blueprint('bookings', __name__)


def _parse_datetime(value):
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        return None


@bookings.route('', methods=['POST'])
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    venue = db.session.get(Venue, data.get('venueId') or '')
    if venue is None:
        return jsonify({'error': 'Venue not found'}), 404
    start_time = _parse_datetime(data.get('startTime'))
    end_time = _parse_datetime(data.get('endTime'))
    if start_time is None or end_time is None:
        return jsonify({'error': 'startTime and endTime must be ISO datetimes'}), 400
    if end_time <= start_time:
        return jsonify({'error': 'endTime must be after startTime'}), 400

    booking = Booking(
        user_id=current_user.id,
        venue_id=venue.id,
        match_id=data.get('matchId'),
        start_time=start_time,
        end_time=end_time,
        total_amount=str(data['totalAmount']) if data.get('totalAmount') is not None else None,
        booker_name=data.get('bookerName') or current_user.display_name,
        booker_phone=data.get('bookerPhone') or current_user.phone_number,
        booker_email=data.get('bookerEmail') or current_user.email,
        booker_place=data.get('bookerPlace'),
        preferred_timing=data.get('preferredTiming'),
    )
    db.session.add(booking)
    db.session.commit()
    current_app.logger.info(f"[booking] id={booking.id} venue={venue.id} user={current_user.id}")

    # The booking stands even if the owner cannot be notified
    if venue.owner_id:
        try:
            create_notification({
                'recipientUserId': venue.owner_id,
                'senderName': booking.booker_name,
                'senderEmail': booking.booker_email,
                'senderPhone': booking.booker_phone or 'Not provided',
                'type': 'booking_request',
                'bookingId': booking.id,
                'location': venue.name,
                'senderPlace': booking.booker_place,
                'preferredTiming': booking.preferred_timing,
                'message': f'{booking.booker_name} requested to book {venue.name}.',
            })
        except Exception as exc:
            db.session.rollback()
            current_app.logger.error(f"[notify-error] booking_request for {booking.id} failed: {exc}")

    return jsonify(booking.to_dict()), 201


@bookings.route('', methods=['GET'])
@login_required
def list_bookings():
    found = Booking.query.filter_by(user_id=current_user.id).order_by(Booking.created_at.desc()).all()
    return jsonify([b.to_dict() for b in found])


@bookings.route('/<string:booking_id>/status', methods=['PATCH'])
@login_required
def update_status(booking_id):
    booking = Booking.query.filter_by(id=booking_id).first_or_404()
    venue = db.session.get(Venue, booking.venue_id)
    if venue is None or venue.owner_id != current_user.id:
        return jsonify({'error': 'Only the venue owner can update this booking'}), 403
    status = (request.get_json(silent=True) or {}).get('status')
    if status not in BOOKING_STATUSES:
        return jsonify({'error': f'status must be one of {", ".join(BOOKING_STATUSES)}'}), 400

    booking.status = status
    db.session.add(booking)
    db.session.commit()
    current_app.logger.info(f"[booking-status] id={booking.id} status={status}")

    if status == 'confirmed':
        try:
            notify_booking_accepted(booking, current_user, venue)
        except Exception as exc:
            db.session.rollback()
            current_app.logger.error(f"[notify-error] booking_accepted for {booking.id} failed: {exc}")
    return jsonify(booking.to_dict())
