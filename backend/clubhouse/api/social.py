from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from clubhouse.api import json_body
from clubhouse.services import social
from clubhouse.services.lifecycle import current_lifecycle


social_bp = Blueprint('social', __name__)


@social_bp.route('/motm/nominations', methods=['POST'])
@login_required
def nominate():
    data = json_body()
    nomination = social.nominate_motm(current_user, data.get('player_id'), current_lifecycle(),
                                      reason=data.get('reason'))
    return jsonify(nomination.to_dict()), 201


@social_bp.route('/motm/<string:game_date>/tally', methods=['GET'])
def tally(game_date):
    return jsonify(social.motm_tally(game_date))


@social_bp.route('/motm/<string:game_date>/award', methods=['POST'])
@login_required
def award(game_date):
    entry = social.award_motm(game_date, current_user)
    return jsonify(entry.to_dict()), 201


@social_bp.route('/kudos', methods=['POST'])
@login_required
def post_kudos():
    data = json_body()
    kudos = social.give_kudos(current_user, data.get('player_id'), data.get('message'), current_lifecycle())
    return jsonify(kudos.to_dict()), 201


@social_bp.route('/kudos', methods=['GET'])
def list_kudos():
    return jsonify([k.to_dict() for k in social.recent_kudos()])
