from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from playkers.services import notifications as service
from playkers.services.notifications import NotificationError

notifications = Blueprint('notifications', __name__)


@notifications.route('', methods=['POST'])
def create():
    data = request.get_json(silent=True) or {}
    try:
        notification = service.create_notification(data)
    except NotificationError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify(notification.to_dict()), 201


@notifications.route('', methods=['GET'])
@login_required
def list_for_user():
    status = request.args.get('status')
    return jsonify([n.to_dict() for n in service.list_notifications(current_user.id, status)])


@notifications.route('/unread-count', methods=['GET'])
@login_required
def unread_count():
    return jsonify({'count': service.unread_count(current_user.id)})


@notifications.route('/mark-all-read', methods=['PATCH'])
@login_required
def mark_all_read():
    updated = service.mark_all_read(current_user.id)
    return jsonify({'message': 'All notifications marked as read', 'updated': updated})


@notifications.route('/<string:notification_id>/status', methods=['PATCH'])
@login_required
def update_status(notification_id):
    notification = service.get_for_recipient(notification_id, current_user.id)
    if notification is None:
        return jsonify({'error': 'Notification not found'}), 404
    status = (request.get_json(silent=True) or {}).get('status')
    if status not in service.SETTABLE_STATUSES:
        return jsonify({'error': 'Invalid status'}), 400
    if status == 'declined':
        service.decline_request(notification, current_user)
    else:
        service.update_status(notification, status)
    current_app.logger.info(f"[notify-status] id={notification.id} status={status}")
    return jsonify(notification.to_dict())


@notifications.route('/<string:notification_id>/accept', methods=['POST'])
@login_required
def accept(notification_id):
    notification = service.get_for_recipient(notification_id, current_user.id)
    if notification is None:
        return jsonify({'error': 'Notification not found'}), 404
    return jsonify(service.accept_request(notification, current_user))


@notifications.route('/<string:notification_id>/accept-booking', methods=['POST'])
@login_required
def accept_booking(notification_id):
    notification = service.get_for_recipient(notification_id, current_user.id)
    if notification is None or notification.type != 'booking_request' or not notification.booking_id:
        return jsonify({'error': 'Booking request not found'}), 404
    booking = service.accept_booking_request(notification, current_user)
    if booking is None:
        return jsonify({'error': 'Booking not found'}), 404
    current_app.logger.info(f"[booking-accept] booking={booking.id} notification={notification.id}")
    return jsonify({'message': 'Booking accepted', 'booking': booking.to_dict(), 'notification': notification.to_dict()})


@notifications.route('/<string:notification_id>', methods=['DELETE'])
@login_required
def delete(notification_id):
    notification = service.get_for_recipient(notification_id, current_user.id)
    if notification is None:
        return jsonify({'error': 'Notification not found'}), 404
    service.delete_notification(notification)
    return jsonify({'message': 'Notification deleted'})
