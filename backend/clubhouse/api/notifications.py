from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from clubhouse.services.notifications import mark_read, notifications_for


notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('', methods=['GET'])
@login_required
def list_notifications():
    return jsonify([n.to_dict() for n in notifications_for(current_user.id)])


@notifications_bp.route('/<int:notification_id>/read', methods=['POST'])
@login_required
def read_notification(notification_id):
    return jsonify(mark_read(notification_id, current_user.id).to_dict())
