"""Stats ledger: append-only per-player history of signed stat changes.

Each entry carries signed deltas for points, goals, assists and Man of the
Match awards, so every aggregate field is a sum over history and
``games_played`` is a count of automatic attendance entries. The totals on
``PlayerStats`` are a cache of that fold, rewritten on every append and
guarded by the row's version column.

Admin edits set absolute values; they are recorded as one reconciling entry
whose deltas move the cached totals to the requested values, so the fold
still matches after the edit.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from clubhouse import db
from clubhouse.errors import ConcurrencyConflictError, NotFoundError, ValidationError
from clubhouse.models import Player, PlayerStats, PointsEntry, utcnow


PLAYED_IN_GAME = 'Played in game'
GOALS_ASSISTS_APPROVED = 'Goals & Assists approved'
MAN_OF_THE_MATCH = 'Man of the Match'
SYSTEM = 'System'


@dataclass(frozen=True)
class LedgerEntry:
    delta: int = 0
    reason: str = ''
    added_by: str = SYSTEM
    added_at: Optional[datetime] = None
    match_date: Optional[str] = None
    automatic: bool = False
    admin_edit: bool = False
    goals_delta: int = 0
    assists_delta: int = 0
    motm_delta: int = 0
    submission_id: Optional[int] = None

    @property
    def counts_as_game_played(self) -> bool:
        return self.reason == PLAYED_IN_GAME and self.automatic

    @classmethod
    def from_row(cls, row: PointsEntry) -> 'LedgerEntry':
        return cls(
            delta=row.delta,
            reason=row.reason,
            added_by=row.added_by,
            added_at=row.added_at,
            match_date=row.match_date,
            automatic=row.automatic,
            admin_edit=row.admin_edit,
            goals_delta=row.goals_delta,
            assists_delta=row.assists_delta,
            motm_delta=row.motm_delta,
            submission_id=row.submission_id,
        )

    def to_dict(self) -> dict:
        return {
            'points': self.delta,
            'goals': self.goals_delta,
            'assists': self.assists_delta,
            'motm': self.motm_delta,
            'reason': self.reason,
            'added_by': self.added_by,
            'added_at': self.added_at.isoformat() if self.added_at else None,
            'match_date': self.match_date,
            'automatic': self.automatic,
            'admin_edit': self.admin_edit,
            'submission_id': self.submission_id,
        }


@dataclass(frozen=True)
class Totals:
    total_points: int = 0
    goals: int = 0
    assists: int = 0
    motm_awards: int = 0
    games_played: int = 0

    def apply(self, entry: LedgerEntry) -> 'Totals':
        """Totals after ``entry``; raises ValidationError if any would go negative."""
        updated = Totals(
            total_points=self.total_points + entry.delta,
            goals=self.goals + entry.goals_delta,
            assists=self.assists + entry.assists_delta,
            motm_awards=self.motm_awards + entry.motm_delta,
            games_played=self.games_played + (1 if entry.counts_as_game_played else 0),
        )
        for name in ('total_points', 'goals', 'assists', 'motm_awards'):
            if getattr(updated, name) < 0:
                label = name.replace('_', ' ')
                raise ValidationError(
                    f"{label.capitalize()} cannot go below zero "
                    f"(currently {getattr(self, name)}, change {getattr(updated, name) - getattr(self, name)})."
                )
        return updated


def fold(entries: Iterable[LedgerEntry]) -> Totals:
    totals = Totals()
    for entry in entries:
        totals = totals.apply(entry)
    return totals


@dataclass(frozen=True)
class PlayerStatsAggregate:
    player_id: int
    player_name: str
    total_points: int = 0
    goals: int = 0
    assists: int = 0
    motm_awards: int = 0
    games_played: int = 0
    history: Tuple[LedgerEntry, ...] = field(default_factory=tuple)

    @property
    def totals(self) -> Totals:
        return Totals(self.total_points, self.goals, self.assists, self.motm_awards, self.games_played)

    def to_dict(self, include_history: bool = True) -> dict:
        data = {
            'player_id': self.player_id,
            'player_name': self.player_name,
            'total_points': self.total_points,
            'goals': self.goals,
            'assists': self.assists,
            'motm_awards': self.motm_awards,
            'games_played': self.games_played,
        }
        if include_history:
            data['history'] = [e.to_dict() for e in self.history]
        return data


def _cached_totals(stats: PlayerStats) -> Totals:
    return Totals(
        total_points=stats.total_points or 0,
        goals=stats.goals or 0,
        assists=stats.assists or 0,
        motm_awards=stats.motm_awards or 0,
        games_played=stats.games_played or 0,
    )


class StatsLedger:
    def __init__(self, session=None):
        self.session = session or db.session

    def _stats_for(self, player_id: int, player_name: Optional[str] = None) -> PlayerStats:
        stats = self.session.get(PlayerStats, player_id)
        if stats is not None:
            return stats
        player = self.session.get(Player, player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        stats = PlayerStats(
            player_id=player_id,
            player_name=player_name or player.name,
            total_points=0, goals=0, assists=0, motm_awards=0, games_played=0, entry_count=0,
        )
        return stats

    def _write(self, commit: bool) -> None:
        try:
            if commit:
                self.session.commit()
            else:
                self.session.flush()
        except (StaleDataError, IntegrityError) as exc:
            self.session.rollback()
            current_app.logger.warning(f"[ledger-conflict] detail={exc}")
            raise ConcurrencyConflictError(
                'These stats were changed by someone else. Reload and try again.'
            )

    def append(self, player_id: int, entry: LedgerEntry, player_name: Optional[str] = None,
               commit: bool = True) -> LedgerEntry:
        """Append ``entry`` to the player's history and refresh the cached totals."""
        stats = self._stats_for(player_id, player_name)
        updated = _cached_totals(stats).apply(entry)
        if entry.added_at is None:
            entry = replace(entry, added_at=utcnow())

        seq = (stats.entry_count or 0) + 1
        stats.entries.append(PointsEntry(
            seq=seq,
            delta=entry.delta,
            goals_delta=entry.goals_delta,
            assists_delta=entry.assists_delta,
            motm_delta=entry.motm_delta,
            reason=entry.reason,
            added_by=entry.added_by,
            added_at=entry.added_at,
            match_date=entry.match_date,
            automatic=entry.automatic,
            admin_edit=entry.admin_edit,
            submission_id=entry.submission_id,
        ))
        stats.entry_count = seq
        stats.total_points = updated.total_points
        stats.goals = updated.goals
        stats.assists = updated.assists
        stats.motm_awards = updated.motm_awards
        stats.games_played = updated.games_played
        if player_name:
            stats.player_name = player_name
        self.session.add(stats)
        self._write(commit)

        current_app.logger.info(
            f"[ledger-append] player={player_id} seq={seq} reason={entry.reason!r} "
            f"points={entry.delta} goals={entry.goals_delta} assists={entry.assists_delta}"
        )
        return entry

    def record_approved_submission(self, submission, reviewer_id, commit: bool = True) -> LedgerEntry:
        """Add the submission's goals and assists on top of the current totals."""
        entry = LedgerEntry(
            reason=GOALS_ASSISTS_APPROVED,
            added_by=str(reviewer_id),
            match_date=submission.game_date,
            goals_delta=submission.goals,
            assists_delta=submission.assists,
            submission_id=submission.id,
        )
        return self.append(submission.player_id, entry, player_name=submission.player_name, commit=commit)

    def record_auto_attendance(self, player_id: int, match_date: str, player_name: Optional[str] = None,
                               commit: bool = True) -> Optional[LedgerEntry]:
        """Record that the player played on ``match_date``; None if already recorded."""
        already = self.session.query(PointsEntry).filter_by(
            player_id=player_id, reason=PLAYED_IN_GAME, match_date=match_date, automatic=True
        ).first()
        if already:
            current_app.logger.info(f"[ledger-skip] player={player_id} attendance already recorded for {match_date}")
            return None
        entry = LedgerEntry(
            delta=int(current_app.config.get('ATTENDANCE_POINTS', 2)),
            reason=PLAYED_IN_GAME,
            added_by=SYSTEM,
            match_date=match_date,
            automatic=True,
        )
        return self.append(player_id, entry, player_name=player_name, commit=commit)

    def record_motm_award(self, player_id: int, match_date: str, awarded_by, commit: bool = True) -> LedgerEntry:
        entry = LedgerEntry(
            reason=MAN_OF_THE_MATCH,
            added_by=str(awarded_by),
            match_date=match_date,
            motm_delta=1,
        )
        return self.append(player_id, entry, commit=commit)

    def record_admin_edit(self, player_id: int, goals: int, assists: int, total_points: Optional[int],
                          edited_by) -> Optional[LedgerEntry]:
        """Set absolute goals / assists / points through one reconciling entry.

        Returns None when the requested values equal the current ones.
        """
        for label, value in (('Goals', goals), ('Assists', assists), ('Points', total_points)):
            if value is None and label == 'Points':
                continue
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValidationError(f"{label} must be a non-negative whole number.")

        stats = self._stats_for(player_id)
        current = _cached_totals(stats)
        if total_points is None:
            total_points = current.total_points
        entry = LedgerEntry(
            delta=total_points - current.total_points,
            goals_delta=goals - current.goals,
            assists_delta=assists - current.assists,
            reason=f"Admin updated stats (Goals: {goals}, Assists: {assists}, Points: {total_points})",
            added_by=str(edited_by),
            admin_edit=True,
        )
        if not (entry.delta or entry.goals_delta or entry.assists_delta):
            return None
        return self.append(player_id, entry)

    def history(self, player_id: int) -> List[LedgerEntry]:
        stats = self.session.get(PlayerStats, player_id)
        if stats is None:
            return []
        return [LedgerEntry.from_row(row) for row in stats.entries]

    def _player_name(self, player_id: int) -> str:
        player = self.session.get(Player, player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        return player.name

    def current_aggregate(self, player_id: int) -> PlayerStatsAggregate:
        """Aggregate rebuilt from history alone."""
        stats = self.session.get(PlayerStats, player_id)
        if stats is None:
            return PlayerStatsAggregate(player_id=player_id, player_name=self._player_name(player_id))
        history = tuple(LedgerEntry.from_row(row) for row in stats.entries)
        totals = fold(history)
        return PlayerStatsAggregate(
            player_id=player_id,
            player_name=stats.player_name,
            total_points=totals.total_points,
            goals=totals.goals,
            assists=totals.assists,
            motm_awards=totals.motm_awards,
            games_played=totals.games_played,
            history=history,
        )

    def cached_aggregate(self, player_id: int) -> PlayerStatsAggregate:
        """Aggregate as stored on the player_stats row."""
        stats = self.session.get(PlayerStats, player_id)
        if stats is None:
            return PlayerStatsAggregate(player_id=player_id, player_name=self._player_name(player_id))
        totals = _cached_totals(stats)
        return PlayerStatsAggregate(
            player_id=player_id,
            player_name=stats.player_name,
            total_points=totals.total_points,
            goals=totals.goals,
            assists=totals.assists,
            motm_awards=totals.motm_awards,
            games_played=totals.games_played,
            history=tuple(LedgerEntry.from_row(row) for row in stats.entries),
        )

    def is_consistent(self, player_id: int) -> bool:
        return self.cached_aggregate(player_id).totals == self.current_aggregate(player_id).totals

    def leaderboard(self) -> List[PlayerStatsAggregate]:
        """Cached aggregates for every rostered player, most points first."""
        rows = []
        for player in Player.query.order_by(Player.name).all():
            stats = player.stats
            if stats is None:
                rows.append(PlayerStatsAggregate(player_id=player.id, player_name=player.name))
                continue
            totals = _cached_totals(stats)
            rows.append(PlayerStatsAggregate(
                player_id=player.id,
                player_name=stats.player_name,
                total_points=totals.total_points,
                goals=totals.goals,
                assists=totals.assists,
                motm_awards=totals.motm_awards,
                games_played=totals.games_played,
            ))
        rows.sort(key=lambda a: (-a.total_points, -a.goals, a.player_name))
        return rows
