from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from clubhouse import socketio
from clubhouse.api import admin_required, json_body
from clubhouse.errors import InvalidInputError
from clubhouse.services.ledger import StatsLedger
from clubhouse.services.lifecycle import current_lifecycle
from clubhouse.services.results import record_attendance
from clubhouse.services.ticker import CLUB_ROOM


stats_bp = Blueprint('stats', __name__)


def _emit_stats_update(player_ids):
    socketio.emit('stats_update', {'player_ids': sorted(player_ids)}, to=CLUB_ROOM, namespace='/ws')


@stats_bp.route('', methods=['GET'])
def leaderboard():
    return jsonify([a.to_dict(include_history=False) for a in StatsLedger().leaderboard()])


@stats_bp.route('/<int:player_id>', methods=['GET'])
def player_stats(player_id):
    return jsonify(StatsLedger().cached_aggregate(player_id).to_dict())


@stats_bp.route('/<int:player_id>', methods=['PUT'])
@admin_required
def edit_player_stats(player_id):
    data = json_body()
    ledger = StatsLedger()
    entry = ledger.record_admin_edit(
        player_id,
        goals=data.get('goals'),
        assists=data.get('assists'),
        total_points=data.get('total_points'),
        edited_by=current_user.id,
    )
    if entry is not None:
        _emit_stats_update([player_id])
    payload = ledger.cached_aggregate(player_id).to_dict()
    payload['changed'] = entry is not None
    return jsonify(payload)


@stats_bp.route('/attendance', methods=['POST'])
@login_required
def post_attendance():
    player_ids = json_body().get('player_ids')
    if not isinstance(player_ids, list) or not player_ids:
        raise InvalidInputError('player_ids must be a non-empty list.')
    recorded = record_attendance(player_ids, current_user, current_lifecycle())
    _emit_stats_update([pid for pid, new in recorded.items() if new])
    return jsonify({'recorded': {str(pid): new for pid, new in recorded.items()}})
