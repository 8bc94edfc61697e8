from datetime import datetime, timedelta

import pytest

from clubhouse.errors import WindowClosedError
from clubhouse.services.lifecycle import (
    LifecyclePhase,
    LifecycleState,
    PostGameAction,
    evaluate_lifecycle,
    post_game_actions,
    require_complete,
)
from clubhouse.services.schedule import Schedule


SATURDAY_6PM = Schedule(days={6: '18:00'})
KICKOFF = datetime(2024, 6, 1, 18, 0)


def test_saturday_evening_within_grace_is_pending():
    state = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 1, 19, 30))
    assert state.phase is LifecyclePhase.TODAY_PENDING
    assert state.game.date == KICKOFF


def test_saturday_after_grace_is_complete():
    state = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 1, 20, 1))
    assert state.phase is LifecyclePhase.COMPLETE
    assert state.game.date == KICKOFF


def test_day_after_game_is_still_complete():
    state = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 2, 10, 0))
    assert state == LifecycleState.complete(state.game)
    assert state.game.date == KICKOFF


def test_two_days_after_game_is_upcoming_next_saturday():
    state = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 3, 10, 0))
    assert state.phase is LifecyclePhase.UPCOMING
    assert state.game.date == datetime(2024, 6, 8, 18, 0)


def test_game_day_morning_is_pending():
    state = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 1, 9, 0))
    assert state.phase is LifecyclePhase.TODAY_PENDING


def test_grace_boundary_is_inclusive():
    at_grace = evaluate_lifecycle(SATURDAY_6PM, KICKOFF + timedelta(hours=2))
    just_before = evaluate_lifecycle(SATURDAY_6PM, KICKOFF + timedelta(hours=2) - timedelta(seconds=1))
    assert at_grace.phase is LifecyclePhase.COMPLETE
    assert just_before.phase is LifecyclePhase.TODAY_PENDING


def test_custom_grace_period():
    state = evaluate_lifecycle(SATURDAY_6PM, KICKOFF + timedelta(minutes=45), grace=timedelta(minutes=30))
    assert state.phase is LifecyclePhase.COMPLETE


def test_late_game_stays_in_window_past_midnight():
    schedule = Schedule(days={6: '23:00'})
    state = evaluate_lifecycle(schedule, datetime(2024, 6, 2, 0, 5))
    # Only 65 minutes after kick-off, so still pending on the day after
    assert state.phase is LifecyclePhase.TODAY_PENDING
    assert state.game.date_key == '2024-06-01'
    assert evaluate_lifecycle(schedule, datetime(2024, 6, 2, 1, 0)).phase is LifecyclePhase.COMPLETE


def test_today_wins_over_yesterday():
    schedule = Schedule(days={5: '18:00', 6: '18:00'})
    state = evaluate_lifecycle(schedule, datetime(2024, 6, 1, 10, 0))
    assert state.phase is LifecyclePhase.TODAY_PENDING
    assert state.game.date_key == '2024-06-01'


@pytest.mark.parametrize('hours', range(0, 24 * 8, 7))
def test_empty_schedule_is_always_dormant(hours):
    state = evaluate_lifecycle(Schedule.empty(), datetime(2024, 6, 1) + timedelta(hours=hours))
    assert state == LifecycleState.dormant()
    assert post_game_actions(state) == frozenset()


@pytest.mark.parametrize('hours', range(0, 24 * 8, 5))
def test_evaluation_is_idempotent(hours):
    now = datetime(2024, 5, 30, 8, 0) + timedelta(hours=hours)
    assert evaluate_lifecycle(SATURDAY_6PM, now) == evaluate_lifecycle(SATURDAY_6PM, now)


def test_post_game_actions_unlock_only_when_complete():
    pending = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 1, 19, 0))
    complete = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 1, 21, 0))
    assert post_game_actions(pending) == frozenset()
    assert post_game_actions(complete) == frozenset(PostGameAction)
    assert 'goals_assists' in complete.to_dict()['actions']


def test_require_complete():
    complete = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 2, 9, 0))
    assert require_complete(complete).date == KICKOFF
    assert require_complete(complete, '2024-06-01').date == KICKOFF
    with pytest.raises(WindowClosedError):
        require_complete(complete, '2024-05-25')
    with pytest.raises(WindowClosedError, match='Kudos'):
        require_complete(evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 4, 9, 0)), action='Kudos')


def test_state_serializes_phase_and_game():
    data = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 3, 10, 0)).to_dict()
    assert data['phase'] == 'upcoming'
    assert data['game']['date_key'] == '2024-06-08'
    assert data['actions'] == []
