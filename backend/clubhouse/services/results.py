"""Admin post-game entry (final score, attendance) and the league table."""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from flask import current_app
from sqlalchemy.exc import IntegrityError

from clubhouse import db
from clubhouse.errors import DuplicateResultError, InvalidInputError, NotFoundError, PermissionDeniedError
from clubhouse.models import GameResult, Player
from .ledger import StatsLedger
from .lifecycle import LifecycleState, require_complete


def _require_admin(user, what: str) -> None:
    if not user.is_admin:
        raise PermissionDeniedError(f"Only administrators can {what}.")


def _score(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(f"{label} score must be a non-negative whole number.")
    return value


def record_result(team1_name: str, team1_score, team2_name: str, team2_score, entered_by,
                  state: LifecycleState, game_date=None) -> GameResult:
    _require_admin(entered_by, 'enter scores')
    game = require_complete(state, game_date, action='Score entry')
    team1_name = (team1_name or '').strip()
    team2_name = (team2_name or '').strip()
    if not team1_name or not team2_name:
        raise InvalidInputError('Both team names are required.')
    if team1_name == team2_name:
        raise InvalidInputError('A team cannot play itself.')
    result = GameResult(
        game_date=game.date_key,
        team1_name=team1_name,
        team1_score=_score(team1_score, team1_name),
        team2_name=team2_name,
        team2_score=_score(team2_score, team2_name),
        entered_by=entered_by.id,
    )
    if GameResult.query.filter_by(game_date=game.date_key).first():
        raise DuplicateResultError('Score has already been entered for this game.')
    db.session.add(result)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateResultError('Score has already been entered for this game.')
    current_app.logger.info(
        f"[result] game={game.date_key} {team1_name} {result.team1_score}-{result.team2_score} {team2_name}"
    )
    return result


def record_attendance(player_ids: Iterable[int], recorded_by, state: LifecycleState) -> Dict[int, bool]:
    """Credit each player with the completed game; maps player id -> newly recorded."""
    _require_admin(recorded_by, 'record attendance')
    game = require_complete(state, action='Recording attendance')
    players = []
    for player_id in player_ids:
        player = db.session.get(Player, player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        players.append(player)

    ledger = StatsLedger()
    recorded = {}
    try:
        for player in players:
            entry = ledger.record_auto_attendance(player.id, game.date_key, player_name=player.name, commit=False)
            recorded[player.id] = entry is not None
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(
        f"[attendance] game={game.date_key} recorded={sum(recorded.values())} of {len(recorded)}"
    )
    return recorded


@dataclass
class TeamStanding:
    team_name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def to_dict(self) -> dict:
        return {
            'team_name': self.team_name,
            'played': self.played,
            'won': self.won,
            'drawn': self.drawn,
            'lost': self.lost,
            'goal_difference': self.goal_difference,
            'points': self.points,
        }


def calculate_standings(results: Iterable[GameResult]) -> List[TeamStanding]:
    """League table: win 3, draw 1, loss 0; ties by wins, goal difference, name."""
    table: Dict[str, TeamStanding] = {}
    for r in results:
        home = table.setdefault(r.team1_name, TeamStanding(r.team1_name))
        away = table.setdefault(r.team2_name, TeamStanding(r.team2_name))
        for team, scored, conceded in ((home, r.team1_score, r.team2_score), (away, r.team2_score, r.team1_score)):
            team.played += 1
            team.goals_for += scored
            team.goals_against += conceded
            if scored > conceded:
                team.won += 1
                team.points += 3
            elif scored == conceded:
                team.drawn += 1
                team.points += 1
            else:
                team.lost += 1
    return sorted(table.values(), key=lambda t: (-t.points, -t.won, -t.goal_difference, t.team_name))
