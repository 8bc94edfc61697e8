from datetime import datetime

import pytest

from clubhouse.errors import (
    AlreadyNominatedError,
    ConcurrencyConflictError,
    DuplicateResultError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    WindowClosedError,
)
from clubhouse.models import GameResult, Notification
from clubhouse.services import results, social
from clubhouse.services.ledger import StatsLedger
from clubhouse.services.lifecycle import evaluate_lifecycle
from clubhouse.services.notifications import mark_read, notifications_for
from clubhouse.services.schedule import Schedule


SATURDAY_6PM = Schedule(days={6: '18:00'})
COMPLETE = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 2, 9, 0))
UPCOMING = evaluate_lifecycle(SATURDAY_6PM, datetime(2024, 6, 4, 9, 0))


@pytest.fixture()
def squad(make_user, make_player):
    users = {name: make_user(name) for name in ('ann', 'ben', 'cal')}
    players = {name: make_player(name.title(), user=user) for name, user in users.items()}
    return users, players


def test_motm_nomination_notifies_nominee(flask_app, squad):
    users, players = squad
    nomination = social.nominate_motm(users['ann'], players['ben'].id, COMPLETE, reason='  Great saves ')
    assert nomination.game_date == '2024-06-01'
    assert nomination.reason == 'Great saves'

    inbox = notifications_for(users['ben'].id)
    assert [n.type for n in inbox] == ['motm']
    assert inbox[0].message == 'ann nominated you for Man of the Match!'
    assert inbox[0].related_player_id == players['ben'].id


def test_one_nomination_per_user_per_game(flask_app, squad):
    users, players = squad
    social.nominate_motm(users['ann'], players['ben'].id, COMPLETE)
    with pytest.raises(AlreadyNominatedError):
        social.nominate_motm(users['ann'], players['cal'].id, COMPLETE)


def test_nominations_need_a_completed_game(flask_app, squad):
    users, players = squad
    with pytest.raises(WindowClosedError):
        social.nominate_motm(users['ann'], players['ben'].id, UPCOMING)


def test_tally_and_award(flask_app, squad, admin):
    users, players = squad
    social.nominate_motm(users['ann'], players['cal'].id, COMPLETE)
    social.nominate_motm(users['ben'], players['cal'].id, COMPLETE)
    social.nominate_motm(users['cal'], players['ann'].id, COMPLETE)

    tally = social.motm_tally('2024-06-01')
    assert [(row['player_name'], row['votes']) for row in tally] == [('Cal', 2), ('Ann', 1)]

    with pytest.raises(PermissionDeniedError):
        social.award_motm('2024-06-01', users['ann'])
    entry = social.award_motm('2024-06-01', admin)
    assert entry.motm_delta == 1
    assert StatsLedger().current_aggregate(players['cal'].id).motm_awards == 1
    with pytest.raises(InvalidInputError):
        social.award_motm('2024-06-01', admin)


def test_award_refuses_ties_and_empty_games(flask_app, squad, admin):
    users, players = squad
    with pytest.raises(InvalidInputError):
        social.award_motm('2024-06-01', admin)
    social.nominate_motm(users['ann'], players['ben'].id, COMPLETE)
    social.nominate_motm(users['ben'], players['ann'].id, COMPLETE)
    with pytest.raises(InvalidInputError, match='tied'):
        social.award_motm('2024-06-01', admin)


def test_kudos_saved_and_notified(flask_app, squad):
    users, players = squad
    kudos = social.give_kudos(users['ann'], players['ben'].id, ' Nice pass! ', COMPLETE)
    assert kudos.message == 'Nice pass!'
    assert [k.id for k in social.recent_kudos()] == [kudos.id]
    assert notifications_for(users['ben'].id)[0].type == 'kudos'


@pytest.mark.parametrize('message', ['', '   ', 'x' * 501])
def test_kudos_message_validation(flask_app, squad, message):
    users, players = squad
    with pytest.raises(InvalidInputError):
        social.give_kudos(users['ann'], players['ben'].id, message, COMPLETE)


def test_kudos_for_unlinked_player_skips_notification(flask_app, squad, make_player):
    users, _ = squad
    guest = make_player('Guest', registered_by=users['ann'])
    social.give_kudos(users['ann'], guest.id, 'Welcome', COMPLETE)
    assert Notification.query.count() == 0


def test_kudos_window(flask_app, squad):
    users, players = squad
    with pytest.raises(WindowClosedError, match='kudos'):
        social.give_kudos(users['ann'], players['ben'].id, 'Too early', UPCOMING)


def test_mark_read_is_scoped_to_owner(flask_app, squad):
    users, players = squad
    social.give_kudos(users['ann'], players['ben'].id, 'Nice', COMPLETE)
    notification = notifications_for(users['ben'].id)[0]
    with pytest.raises(NotFoundError):
        mark_read(notification.id, users['ann'].id)
    assert mark_read(notification.id, users['ben'].id).read is True


def test_record_result_once_per_game(flask_app, admin):
    result = results.record_result('Reds', 3, 'Blues', 1, admin, COMPLETE)
    assert result.game_date == '2024-06-01'
    with pytest.raises(DuplicateResultError):
        results.record_result('Reds', 0, 'Blues', 0, admin, COMPLETE)


@pytest.mark.parametrize('team1,score1,team2,score2', [
    ('', 1, 'Blues', 0),
    ('Reds', -1, 'Blues', 0),
    ('Reds', 1, 'Reds', 0),
    ('Reds', '2', 'Blues', 0),
])
def test_record_result_validation(flask_app, admin, team1, score1, team2, score2):
    with pytest.raises(InvalidInputError):
        results.record_result(team1, score1, team2, score2, admin, COMPLETE)


def test_record_result_admin_only_and_windowed(flask_app, admin, make_user):
    with pytest.raises(PermissionDeniedError):
        results.record_result('Reds', 1, 'Blues', 0, make_user('ann'), COMPLETE)
    with pytest.raises(WindowClosedError):
        results.record_result('Reds', 1, 'Blues', 0, admin, UPCOMING)


def test_attendance_credits_each_player_once(flask_app, squad, admin):
    _, players = squad
    ids = [players['ann'].id, players['ben'].id]
    assert results.record_attendance(ids, admin, COMPLETE) == {ids[0]: True, ids[1]: True}
    assert results.record_attendance(ids, admin, COMPLETE) == {ids[0]: False, ids[1]: False}
    aggregate = StatsLedger().current_aggregate(players['ann'].id)
    assert (aggregate.games_played, aggregate.total_points) == (1, 2)


def test_attendance_unknown_player_records_nothing(flask_app, squad, admin):
    _, players = squad
    with pytest.raises(NotFoundError):
        results.record_attendance([players['ann'].id, 999], admin, COMPLETE)
    assert StatsLedger().current_aggregate(players['ann'].id).games_played == 0


def test_standings_order():
    games = [
        GameResult(team1_name='Reds', team1_score=2, team2_name='Blues', team2_score=0),
        GameResult(team1_name='Greens', team1_score=1, team2_name='Reds', team2_score=1),
        GameResult(team1_name='Blues', team1_score=4, team2_name='Greens', team2_score=0),
    ]
    table = results.calculate_standings(games)
    assert [t.team_name for t in table] == ['Reds', 'Blues', 'Greens']
    reds = table[0].to_dict()
    assert (reds['played'], reds['won'], reds['drawn'], reds['points'], reds['goal_difference']) == (2, 1, 1, 4, 2)
    assert table[1].points == 3 and table[1].goal_difference == 2
    assert table[2].points == 1


def test_attendance_is_all_or_nothing(flask_app, squad, admin, monkeypatch):
    _, players = squad
    ids = [players['ann'].id, players['ben'].id]
    real = StatsLedger.record_auto_attendance

    def conflict_on_ben(self, player_id, *args, **kwargs):
        if player_id == ids[1]:
            raise ConcurrencyConflictError('stats changed')
        return real(self, player_id, *args, **kwargs)

    monkeypatch.setattr(StatsLedger, 'record_auto_attendance', conflict_on_ben)
    with pytest.raises(ConcurrencyConflictError):
        results.record_attendance(ids, admin, COMPLETE)
    monkeypatch.undo()

    assert StatsLedger().current_aggregate(ids[0]).games_played == 0
    assert results.record_attendance(ids, admin, COMPLETE) == {ids[0]: True, ids[1]: True}
