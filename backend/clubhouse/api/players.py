from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from clubhouse.api import json_body
from clubhouse.services.roster import add_player, register_self, roster


players_bp = Blueprint('players', __name__)


@players_bp.route('', methods=['GET'])
def list_players():
    return jsonify([p.to_dict() for p in roster()])


@players_bp.route('', methods=['POST'])
@login_required
def create_player():
    player = add_player(json_body().get('name'), current_user)
    return jsonify(player.to_dict()), 201


@players_bp.route('/me', methods=['POST'])
@login_required
def create_own_player():
    player = register_self(json_body().get('name'), current_user)
    return jsonify(player.to_dict()), 201
