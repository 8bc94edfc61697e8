from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from clubhouse import socketio
from clubhouse.api import admin_required, json_body
from clubhouse.services import submissions as workflow
from clubhouse.services.lifecycle import current_lifecycle
from clubhouse.services.ticker import CLUB_ROOM


submissions_bp = Blueprint('submissions', __name__)


def _emit(submission):
    socketio.emit('submission_update', {'id': submission.id, 'status': submission.status},
                  to=CLUB_ROOM, namespace='/ws')


@submissions_bp.route('', methods=['POST'])
@login_required
def create_submission():
    data = json_body()
    submission = workflow.submit(
        data.get('player_id'),
        data.get('game_date'),
        data.get('goals', 0),
        data.get('assists', 0),
        current_user,
        current_lifecycle(),
    )
    _emit(submission)
    return jsonify(submission.to_dict()), 201


@submissions_bp.route('/mine', methods=['GET'])
@login_required
def my_submissions():
    return jsonify([s.to_dict() for s in workflow.submissions_for(current_user)])


@submissions_bp.route('/pending', methods=['GET'])
@admin_required
def pending_submissions():
    return jsonify([s.to_dict() for s in workflow.pending_queue()])


@submissions_bp.route('/<int:submission_id>/approve', methods=['POST'])
@login_required
def approve_submission(submission_id):
    submission = workflow.approve(submission_id, current_user)
    _emit(submission)
    socketio.emit('stats_update', {'player_ids': [submission.player_id]}, to=CLUB_ROOM, namespace='/ws')
    return jsonify(submission.to_dict())


@submissions_bp.route('/<int:submission_id>/reject', methods=['POST'])
@login_required
def reject_submission(submission_id):
    submission = workflow.reject(submission_id, current_user)
    _emit(submission)
    return jsonify(submission.to_dict())
