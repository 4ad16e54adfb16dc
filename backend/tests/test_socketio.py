import math

from app import socketio


def _events(test_client, name):
    return [pkt['args'][0] if pkt['args'] else None
            for pkt in test_client.get_received() if pkt['name'] == name]


def _joined_pair(flask_app, sio_client):
    other = socketio.test_client(flask_app)
    sio_client.emit('join')
    other.emit('join')
    return other


def test_socket_connect_greets(sio_client):
    assert sio_client.is_connected()
    received = sio_client.get_received()
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_ping_pong(sio_client):
    sio_client.get_received()
    sio_client.emit('ping', {'n': 1})
    assert _events(sio_client, 'pong') == [{'n': 1}]


def test_join_sends_private_state(sio_client):
    sio_client.get_received()
    sio_client.emit('join')
    received = sio_client.get_received()
    names = [pkt['name'] for pkt in received]
    assert names[:3] == ['joined', 'roster', 'puck_state']
    joined = received[0]['args'][0]
    assert joined['success'] is True
    assert joined['seat'] == 1
    roster = received[1]['args'][0]['players']
    assert [(p['seat'], p['x'], p['y']) for p in roster] == [(1, 100, 200)]


def test_second_join_notifies_first_player(flask_app, sio_client):
    sio_client.emit('join')
    sio_client.get_received()
    other = socketio.test_client(flask_app)
    other.emit('join')
    added = _events(sio_client, 'player_added')
    assert [p['seat'] for p in added] == [2]
    assert _events(other, 'player_added') == []
    other.disconnect()


def test_lobby_overflow_is_rejected(flask_app, sio_client):
    other = _joined_pair(flask_app, sio_client)
    third = socketio.test_client(flask_app)
    third.get_received()
    third.emit('join')
    joined = _events(third, 'joined')
    assert joined == [{'success': False, 'reason': 'Sorry, the lobby is full.'}]
    assert len(flask_app.extensions['match'].world.players) == 2
    third.disconnect()
    other.disconnect()


def test_disconnect_frees_seat_for_next_joiner(flask_app, sio_client):
    other = _joined_pair(flask_app, sio_client)
    sio_client.disconnect()
    removed = _events(other, 'player_removed')
    assert removed == [{'seat': 1}]

    newcomer = socketio.test_client(flask_app)
    newcomer.emit('join')
    joined = _events(newcomer, 'joined')
    assert joined[0]['seat'] == 1
    newcomer.disconnect()
    other.disconnect()


def test_explicit_leave(flask_app, sio_client):
    sio_client.emit('join')
    sio_client.emit('leave')
    assert _events(sio_client, 'player_removed') == [{'seat': 1}]
    assert flask_app.extensions['match'].world.players == {}


def test_malformed_payloads_are_dropped(flask_app, sio_client):
    match = flask_app.extensions['match']
    sio_client.emit('join')
    player = match.world.players[1]

    sio_client.emit('move', {'dx': 'left', 'dy': 0})
    sio_client.emit('move', None)
    sio_client.emit('move')
    sio_client.emit('set_pointer', {'x': 10})
    sio_client.emit('set_pointer', {'x': True, 'y': 3})
    sio_client.emit('shoot', ['not', 'a', 'dict'])
    sio_client.emit('jolt', {'pointer': {'x': float('nan'), 'y': 1}})

    assert player.intent is None
    assert player.pointer is None
    assert player.can_jolt
    assert sio_client.is_connected()


def test_out_of_range_numbers_are_dropped(flask_app, sio_client):
    match = flask_app.extensions['match']
    sio_client.emit('join')
    player = match.world.players[1]
    puck = match.world.puck
    puck.x, puck.y = 110, 200
    match.tick()
    assert puck.held_by == 1

    sio_client.emit('move', {'dx': 1e308, 'dy': 0})
    sio_client.emit('move', {'dx': 10 ** 400, 'dy': 0})
    sio_client.emit('set_pointer', {'x': -1e308, 'y': 0})
    sio_client.emit('shoot', {'vx': 1e308, 'vy': 0})
    sio_client.emit('shoot', {'vx': 0, 'vy': -(10 ** 400)})

    assert player.intent is None
    assert player.pointer is None
    assert puck.held_by == 1
    assert sio_client.is_connected()


def test_huge_inputs_never_reach_broadcasts(flask_app, sio_client):
    match = flask_app.extensions['match']
    other = _joined_pair(flask_app, sio_client)
    first, second = match.world.players[1], match.world.players[2]
    second.x, second.y = first.x + 10, first.y

    for _ in range(3):
        sio_client.emit('move', {'dx': 1e308, 'dy': 0})
        other.emit('move', {'dx': -1e308, 'dy': 0})
        match.tick()

    for player in (first, second):
        state = player.to_dict()
        assert all(math.isfinite(state[key]) for key in ('x', 'y', 'vx', 'vy'))
    other.disconnect()


def test_input_events_reach_the_match(flask_app, sio_client):
    match = flask_app.extensions['match']
    sio_client.emit('join')
    player = match.world.players[1]

    sio_client.emit('move', {'dx': 1, 'dy': 0})
    sio_client.emit('set_pointer', {'x': 100, 'y': 300})
    assert player.intent == (1.0, 0.0)
    assert player.pointer == (100.0, 300.0)

    sio_client.get_received()
    sio_client.emit('jolt', {'pointer': {'x': 100, 'y': 0}})
    assert not player.can_jolt
    assert player.vy == -15
    assert _events(sio_client, 'speed_modifier_changed') == [{'seat': 1, 'modifier': 0.7}]


def test_tick_broadcasts_to_every_client(flask_app, sio_client):
    match = flask_app.extensions['match']
    other = _joined_pair(flask_app, sio_client)
    sio_client.get_received()
    other.get_received()

    match.tick()

    for test_client in (sio_client, other):
        received = test_client.get_received()
        moved = [pkt['args'][0]['seat'] for pkt in received if pkt['name'] == 'player_moved']
        assert moved == [1, 2]
        assert any(pkt['name'] == 'puck_state' for pkt in received)
    other.disconnect()


def test_shoot_over_socket(flask_app, sio_client):
    match = flask_app.extensions['match']
    sio_client.emit('join')
    puck = match.world.puck
    puck.x, puck.y = 110, 200
    match.tick()
    assert _events(sio_client, 'possession')[-1] == {'seat': 1, 'has_puck': True}

    sio_client.emit('shoot', {'vx': 5, 'vy': 0})
    received = sio_client.get_received()
    assert [pkt['args'][0] for pkt in received if pkt['name'] == 'possession'] == [{'seat': 1, 'has_puck': False}]
    shot = [pkt['args'][0] for pkt in received if pkt['name'] == 'puck_shot']
    assert shot[0]['held_by'] is None
    assert (shot[0]['vx'], shot[0]['vy']) == (5, 0)
