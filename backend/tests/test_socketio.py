def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    sio_client.emit('join_match', {'matchId': 'match-abc'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)
    joined = [pkt for pkt in received if pkt['name'] == 'joined']
    assert joined and joined[0]['args'][0] == {'room': 'match:match-abc'}


def test_join_without_match_id_reports_error(sio_client):
    sio_client.get_received('/ws')  # flush
    sio_client.emit('join_match', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert [pkt['name'] for pkt in received] == ['error']


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'t': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert received[0]['name'] == 'pong'
    assert received[0]['args'][0] == {'t': 1}


def test_score_update_pushes_match_update(sio_client, make_user):
    _, scorer = make_user('scorer@playkers.dev')
    match_id = scorer.post('/api/matches', json={'title': 'Live', 'sport': 'kabaddi'}).get_json()['id']

    sio_client.emit('join_match', {'matchId': match_id}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    scorer.put(f'/api/matches/{match_id}', json={'team1Score': 12, 'status': 'live'})
    events = [e for e in sio_client.get_received('/ws') if e['name'] == 'match_update']
    assert len(events) == 1
    pushed = events[0]['args'][0]
    assert pushed['id'] == match_id
    assert pushed['team1Score'] == 12
    assert pushed['status'] == 'live'


def test_left_room_gets_no_updates(sio_client, make_user):
    _, scorer = make_user('scorer@playkers.dev')
    match_id = scorer.post('/api/matches', json={'title': 'Live', 'sport': 'tennis'}).get_json()['id']

    sio_client.emit('join_match', {'matchId': match_id}, namespace='/ws')
    sio_client.emit('leave_match', {'matchId': match_id}, namespace='/ws')
    sio_client.get_received('/ws')

    scorer.put(f'/api/matches/{match_id}', json={'team2Score': 3})
    assert not [e for e in sio_client.get_received('/ws') if e['name'] == 'match_update']
