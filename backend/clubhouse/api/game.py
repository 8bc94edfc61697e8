from flask import Blueprint, jsonify

from clubhouse.services.lifecycle import current_lifecycle


game_bp = Blueprint('game', __name__)


@game_bp.route('/state', methods=['GET'])
def get_lifecycle_state():
    return jsonify(current_lifecycle().to_dict())
