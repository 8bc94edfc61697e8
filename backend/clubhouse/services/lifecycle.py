"""Game lifecycle: the single state the club is in relative to its games.

- dormant: nothing scheduled
- upcoming: no game today or yesterday; ``game`` is the next one
- pending: a game today (or yesterday, still in the day-after window) that
  kicked off less than the grace period ago, or has not kicked off yet
- complete: that game kicked off at least the grace period ago; post-game
  actions are unlocked

States are values recomputed on every evaluation, never mutated.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import FrozenSet, Optional

from clubhouse.errors import WindowClosedError
from .clock import GameOccurrence, elapsed_since, evaluate, is_current_or_day_after
from .schedule import Schedule


DEFAULT_GRACE_PERIOD = timedelta(hours=2)


class LifecyclePhase(Enum):
    DORMANT = 'dormant'
    UPCOMING = 'upcoming'
    TODAY_PENDING = 'pending'
    COMPLETE = 'complete'


class PostGameAction(Enum):
    MOTM_NOMINATION = 'motm_nomination'
    KUDOS = 'kudos'
    GOALS_ASSISTS = 'goals_assists'
    SCORE_ENTRY = 'score_entry'


@dataclass(frozen=True)
class LifecycleState:
    phase: LifecyclePhase
    game: Optional[GameOccurrence] = None

    @classmethod
    def dormant(cls) -> 'LifecycleState':
        return cls(LifecyclePhase.DORMANT)

    @classmethod
    def upcoming(cls, game: GameOccurrence) -> 'LifecycleState':
        return cls(LifecyclePhase.UPCOMING, game)

    @classmethod
    def today_pending(cls, game: GameOccurrence) -> 'LifecycleState':
        return cls(LifecyclePhase.TODAY_PENDING, game)

    @classmethod
    def complete(cls, game: GameOccurrence) -> 'LifecycleState':
        return cls(LifecyclePhase.COMPLETE, game)

    @property
    def is_complete(self) -> bool:
        return self.phase is LifecyclePhase.COMPLETE

    def to_dict(self) -> dict:
        return {
            'phase': self.phase.value,
            'game': self.game.to_dict() if self.game else None,
            'actions': sorted(a.value for a in post_game_actions(self)),
        }


def grace_period(config) -> timedelta:
    return timedelta(minutes=int(config.get('GAME_GRACE_PERIOD_MIN', 120)))


def evaluate_lifecycle(schedule: Schedule, now: datetime,
                       grace: timedelta = DEFAULT_GRACE_PERIOD) -> LifecycleState:
    reading = evaluate(schedule, now)

    game = None
    if reading.today and is_current_or_day_after(reading.today, now):
        game = reading.today
    elif reading.yesterday and is_current_or_day_after(reading.yesterday, now):
        game = reading.yesterday

    if game is not None:
        if elapsed_since(game.date, now) >= grace:
            return LifecycleState.complete(game)
        return LifecycleState.today_pending(game)
    if reading.next is not None:
        return LifecycleState.upcoming(reading.next)
    return LifecycleState.dormant()


def post_game_actions(state: LifecycleState) -> FrozenSet[PostGameAction]:
    if state.is_complete:
        return frozenset(PostGameAction)
    return frozenset()


def require_complete(state: LifecycleState, game_date: Optional[str] = None,
                     action: str = 'This action') -> GameOccurrence:
    """Return the completed game or raise WindowClosedError.

    With ``game_date`` the completed game must also fall on that date.
    """
    if not state.is_complete:
        raise WindowClosedError(f"{action} is only available after a game has been played.")
    if game_date is not None and game_date != state.game.date_key:
        raise WindowClosedError(
            f"{action} is only available for the most recent game ({state.game.date_key})."
        )
    return state.game


def current_lifecycle(now: Optional[datetime] = None) -> LifecycleState:
    """Lifecycle for the stored schedule at ``now`` (club wall clock by default)."""
    from flask import current_app
    from . import clock
    from .schedule import load_schedule
    cfg = current_app.config
    if now is None:
        now = clock.club_now(cfg.get('CLUB_TIMEZONE'))
    return evaluate_lifecycle(load_schedule(), now, grace=grace_period(cfg))
