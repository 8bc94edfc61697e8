"""Post-game social actions: Man of the Match and kudos."""

from collections import Counter
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from clubhouse import db
from clubhouse.errors import AlreadyNominatedError, InvalidInputError, NotFoundError, PermissionDeniedError
from clubhouse.models import Kudos, MotmNomination, Player, PointsEntry
from .ledger import MAN_OF_THE_MATCH, LedgerEntry, StatsLedger
from .lifecycle import LifecycleState, require_complete
from .notifications import notify, push


MAX_KUDOS_LENGTH = 500


def _player(player_id: int) -> Player:
    player = db.session.get(Player, player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id} not found")
    return player


def nominate_motm(nominator, player_id: int, state: LifecycleState,
                  reason: Optional[str] = None) -> MotmNomination:
    game = require_complete(state, action='Man of the Match nomination')
    player = _player(player_id)
    if MotmNomination.query.filter_by(nominated_by=nominator.id, game_date=game.date_key).first():
        raise AlreadyNominatedError('You have already nominated a player for this game.')

    nomination = MotmNomination(
        game_date=game.date_key,
        nominated_player_id=player.id,
        nominated_player_name=player.name,
        nominated_by=nominator.id,
        reason=(reason or '').strip() or None,
    )
    db.session.add(nomination)
    notification = None
    if player.user_id:
        notification = notify(player.user_id, 'motm',
                              f"{nominator.username} nominated you for Man of the Match!",
                              from_user=nominator.username, player=player)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyNominatedError('You have already nominated a player for this game.')
    current_app.logger.info(f"[motm-nominate] game={game.date_key} player={player.id} by={nominator.id}")
    if notification is not None:
        push(notification)
    return nomination


def motm_tally(game_date: str) -> List[dict]:
    """Vote counts for ``game_date``, most votes first."""
    nominations = MotmNomination.query.filter_by(game_date=game_date).all()
    names = {n.nominated_player_id: n.nominated_player_name for n in nominations}
    counts = Counter(n.nominated_player_id for n in nominations)
    tally = [
        {'player_id': pid, 'player_name': names[pid], 'votes': votes}
        for pid, votes in counts.items()
    ]
    tally.sort(key=lambda row: (-row['votes'], row['player_name']))
    return tally


def award_motm(game_date: str, awarded_by) -> LedgerEntry:
    """Credit the most-nominated player for ``game_date`` with the award."""
    if not awarded_by.is_admin:
        raise PermissionDeniedError('Only administrators can award Man of the Match.')
    if PointsEntry.query.filter_by(reason=MAN_OF_THE_MATCH, match_date=game_date).first():
        raise InvalidInputError(f"Man of the Match has already been awarded for {game_date}.")
    tally = motm_tally(game_date)
    if not tally:
        raise InvalidInputError(f"No Man of the Match nominations for {game_date}.")
    if len(tally) > 1 and tally[0]['votes'] == tally[1]['votes']:
        raise InvalidInputError('Nominations are tied; no single Man of the Match can be awarded.')
    winner = tally[0]
    entry = StatsLedger().record_motm_award(winner['player_id'], game_date, awarded_by.id)
    current_app.logger.info(
        f"[motm-award] game={game_date} player={winner['player_id']} votes={winner['votes']}"
    )
    return entry


def give_kudos(sender, player_id: int, message: str, state: LifecycleState) -> Kudos:
    require_complete(state, action='Giving kudos')
    text = (message or '').strip()
    if not text:
        raise InvalidInputError('Please enter a message.')
    if len(text) > MAX_KUDOS_LENGTH:
        raise InvalidInputError(f"Kudos messages are limited to {MAX_KUDOS_LENGTH} characters.")
    player = _player(player_id)

    kudos = Kudos(
        from_user_id=sender.id,
        to_player_id=player.id,
        to_player_name=player.name,
        message=text,
    )
    db.session.add(kudos)
    notification = None
    if player.user_id:
        notification = notify(player.user_id, 'kudos', f"{sender.username} gave you kudos!",
                              from_user=sender.username, player=player)
    db.session.commit()
    current_app.logger.info(f"[kudos] player={player.id} by={sender.id}")
    if notification is not None:
        push(notification)
    return kudos


def recent_kudos(limit: int = 50) -> List[Kudos]:
    return Kudos.query.order_by(Kudos.created_at.desc(), Kudos.id.desc()).limit(limit).all()
