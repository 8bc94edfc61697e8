from datetime import datetime

from conftest import SATURDAY_SCHEDULE, login


def _names(events):
    return [e['name'] for e in events]


def _args(events, name):
    return [e['args'][0] for e in events if e['name'] == name]


def test_socket_connect_and_join_club(sio_client, saved_schedule, frozen_now):
    frozen_now(datetime(2024, 6, 1, 21, 0))
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    assert 'connected' in _names(sio_client.get_received('/ws'))

    sio_client.emit('join_club', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert {'room': 'club'} in _args(received, 'joined')
    state = _args(received, 'lifecycle_update')[0]
    assert state['phase'] == 'complete'
    assert state['game']['date_key'] == '2024-06-01'


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    assert _args(sio_client.get_received('/ws'), 'pong') == [{'n': 1}]


def test_schedule_change_pushes_to_club_room(client, sio_client, admin, frozen_now):
    frozen_now(datetime(2024, 6, 3, 12, 0))
    sio_client.emit('join_club', {}, namespace='/ws')
    state = _args(sio_client.get_received('/ws'), 'lifecycle_update')[0]
    assert state['phase'] == 'dormant'

    login(client, 'admin')
    body = {'days': {str(d): t for d, t in SATURDAY_SCHEDULE['days'].items()},
            'locations': {str(d): where for d, where in SATURDAY_SCHEDULE['locations'].items()}}
    assert client.put('/api/schedule', json=body).status_code == 200

    received = sio_client.get_received('/ws')
    assert _args(received, 'schedule_update') == [body]
    state = _args(received, 'lifecycle_update')[0]
    assert state['phase'] == 'upcoming'
    assert state['game']['date_key'] == '2024-06-08'


def test_leaving_club_stops_updates(client, sio_client, admin):
    sio_client.emit('join_club', {}, namespace='/ws')
    sio_client.emit('leave_club', {}, namespace='/ws')
    sio_client.get_received('/ws')

    login(client, 'admin')
    client.put('/api/schedule', json={'days': {'6': '18:00'}, 'locations': {}})
    assert 'schedule_update' not in _names(sio_client.get_received('/ws'))


def test_join_user_requires_login(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_user', {}, namespace='/ws')
    assert _args(sio_client.get_received('/ws'), 'error') == [{'message': 'Login required'}]


def test_kudos_notification_pushed_to_user_room(flask_app, client, make_user, make_player,
                                                saved_schedule, frozen_now):
    from clubhouse import socketio

    make_user('ann')
    ben = make_user('ben')
    ben_player = make_player('Ben', user=ben)
    frozen_now(datetime(2024, 6, 1, 21, 0))

    ben_http = flask_app.test_client()
    login(ben_http, 'ben')
    ben_socket = socketio.test_client(flask_app, flask_test_client=ben_http, namespace='/ws')
    ben_socket.emit('join_user', {}, namespace='/ws')
    assert {'room': f'user:{ben.id}'} in _args(ben_socket.get_received('/ws'), 'joined')

    login(client, 'ann')
    assert client.post('/api/kudos', json={'player_id': ben_player.id, 'message': 'Great run'}).status_code == 201

    pushed = _args(ben_socket.get_received('/ws'), 'notification')
    assert [n['type'] for n in pushed] == ['kudos']
    assert pushed[0]['message'] == 'ann gave you kudos!'
    ben_socket.disconnect(namespace='/ws')
