from flask import Blueprint, jsonify
from flask_login import current_user

from clubhouse import socketio
from clubhouse.api import admin_required, json_body
from clubhouse.services.lifecycle import current_lifecycle
from clubhouse.services.schedule import Schedule, load_schedule, save_schedule
from clubhouse.services.ticker import CLUB_ROOM, broadcast_lifecycle


schedule_bp = Blueprint('schedule', __name__)


@schedule_bp.route('', methods=['GET'])
def get_schedule():
    return jsonify(load_schedule().to_document())


@schedule_bp.route('', methods=['PUT'])
@admin_required
def replace_schedule():
    schedule = save_schedule(Schedule.from_document(json_body()), updated_by=current_user.id)
    document = schedule.to_document()
    socketio.emit('schedule_update', document, to=CLUB_ROOM, namespace='/ws')
    # Schedule changes re-evaluate immediately instead of waiting for the ticker
    broadcast_lifecycle(current_lifecycle())
    return jsonify(document)
