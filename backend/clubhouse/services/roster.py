"""Roster entry points: adding players and linking a player to an account."""

from typing import List

from flask import current_app

from clubhouse import db
from clubhouse.errors import InvalidInputError
from clubhouse.models import Player


MAX_NAME_LENGTH = 64


def _clean_name(name) -> str:
    text = name.strip() if isinstance(name, str) else ''
    if not text:
        raise InvalidInputError('Please enter a player name.')
    if len(text) > MAX_NAME_LENGTH:
        raise InvalidInputError(f"Player names are limited to {MAX_NAME_LENGTH} characters.")
    return text


def add_player(name, registered_by) -> Player:
    """Add someone else to the roster; ``registered_by`` may submit stats for them."""
    player = Player(name=_clean_name(name), registered_by=registered_by.id)
    db.session.add(player)
    db.session.commit()
    current_app.logger.info(f"[player-add] id={player.id} by={registered_by.id}")
    return player


def register_self(name, user) -> Player:
    """Create the player linked to ``user``'s account; one per account."""
    name = _clean_name(name)
    if Player.query.filter_by(user_id=user.id).first():
        raise InvalidInputError('You are already registered as a player.')
    player = Player(name=name, user_id=user.id, registered_by=user.id)
    db.session.add(player)
    db.session.commit()
    current_app.logger.info(f"[player-self-register] id={player.id} user={user.id}")
    return player


def roster() -> List[Player]:
    return Player.query.order_by(Player.name, Player.id).all()
