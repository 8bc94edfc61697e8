"""Goals & assists submissions: players submit, admins approve or reject.

A submission moves pending -> approved or pending -> rejected exactly once.
Review is a conditional update on ``status = 'pending'`` so two reviewers
racing on the same submission produce one transition and, for approvals,
one ledger entry. The status change and the ledger entry share a commit.
"""

from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from clubhouse import db
from clubhouse.errors import (
    ConcurrencyConflictError,
    DuplicatePendingError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from clubhouse.models import Player, Submission, utcnow
from .ledger import StatsLedger
from .lifecycle import LifecycleState, require_complete


PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'


def can_submit_for(user, player: Player) -> bool:
    """Admins submit for anyone; players for themselves or players they registered."""
    return user.is_admin or player.user_id == user.id or player.registered_by == user.id


def _count(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{label} must be a whole number.")
    if value < 0:
        raise InvalidInputError(f"{label} must be a non-negative number.")
    return value


def submit(player_id: int, game_date: Optional[str], goals, assists, submitted_by,
           state: LifecycleState) -> Submission:
    goals = _count(goals, 'Goals')
    assists = _count(assists, 'Assists')
    if goals == 0 and assists == 0:
        raise InvalidInputError('Please enter at least one goal or assist.')

    game = require_complete(state, game_date, action='Submitting goals & assists')

    player = db.session.get(Player, player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id} not found")
    if not can_submit_for(submitted_by, player):
        raise PermissionDeniedError('You can only submit stats for yourself or players you registered.')

    existing = Submission.query.filter_by(player_id=player.id, game_date=game.date_key, status=PENDING).first()
    if existing:
        raise DuplicatePendingError(
            'Stats for this player and game are already waiting for admin approval.'
        )

    submission = Submission(
        player_id=player.id,
        player_name=player.name,
        game_date=game.date_key,
        goals=goals,
        assists=assists,
        submitted_by=submitted_by.id,
        status=PENDING,
    )
    db.session.add(submission)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicatePendingError(
            'Stats for this player and game are already waiting for admin approval.'
        )
    current_app.logger.info(
        f"[submission-create] id={submission.id} player={player.id} game={game.date_key} "
        f"goals={goals} assists={assists} by={submitted_by.id}"
    )
    return submission


def _require_admin(user, verb: str) -> None:
    if not user.is_admin:
        raise PermissionDeniedError(f"Only administrators can {verb} submissions.")


def _transition(submission_id: int, reviewer, new_status: str) -> Submission:
    """Conditionally move a pending submission to ``new_status`` (uncommitted)."""
    submission = db.session.get(Submission, submission_id)
    if submission is None:
        raise NotFoundError(f"Submission {submission_id} not found")
    updated = Submission.query.filter_by(id=submission_id, status=PENDING).update(
        {'status': new_status, 'reviewed_by': reviewer.id, 'reviewed_at': utcnow()},
        synchronize_session=False,
    )
    if updated != 1:
        db.session.rollback()
        raise ConcurrencyConflictError(
            f"Submission {submission_id} has already been {submission.status}."
        )
    return submission


def approve(submission_id: int, reviewer) -> Submission:
    _require_admin(reviewer, 'approve')
    submission = _transition(submission_id, reviewer, APPROVED)
    try:
        StatsLedger().record_approved_submission(submission, reviewer.id, commit=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(
        f"[submission-approve] id={submission.id} player={submission.player_id} "
        f"goals={submission.goals} assists={submission.assists} by={reviewer.id}"
    )
    return submission


def reject(submission_id: int, reviewer) -> Submission:
    _require_admin(reviewer, 'reject')
    submission = _transition(submission_id, reviewer, REJECTED)
    db.session.commit()
    current_app.logger.info(f"[submission-reject] id={submission.id} player={submission.player_id} by={reviewer.id}")
    return submission


def pending_queue() -> List[Submission]:
    """Pending submissions, newest first."""
    return (
        Submission.query.filter_by(status=PENDING)
        .order_by(Submission.created_at.desc(), Submission.id.desc())
        .all()
    )


def submissions_for(user) -> List[Submission]:
    return (
        Submission.query.filter_by(submitted_by=user.id, status=PENDING)
        .order_by(Submission.created_at.desc(), Submission.id.desc())
        .all()
    )
