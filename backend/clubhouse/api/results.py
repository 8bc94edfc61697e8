from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from clubhouse.api import json_body
from clubhouse.models import GameResult
from clubhouse.services.lifecycle import current_lifecycle
from clubhouse.services.results import calculate_standings, record_result


results_bp = Blueprint('results', __name__)


@results_bp.route('', methods=['POST'])
@login_required
def post_result():
    data = json_body()
    result = record_result(
        data.get('team1_name'), data.get('team1_score'),
        data.get('team2_name'), data.get('team2_score'),
        current_user, current_lifecycle(), game_date=data.get('game_date'),
    )
    return jsonify(result.to_dict()), 201


@results_bp.route('', methods=['GET'])
def list_results():
    results = GameResult.query.order_by(GameResult.game_date.desc()).all()
    return jsonify([r.to_dict() for r in results])


@results_bp.route('/standings', methods=['GET'])
def standings():
    return jsonify([t.to_dict() for t in calculate_standings(GameResult.query.all())])
