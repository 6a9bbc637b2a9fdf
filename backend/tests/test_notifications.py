from playkers.models import Notification, Player


def request_payload(recipient_id, **extra):
    payload = {
        'recipientUserId': recipient_id,
        'senderName': 'Asha',
        'senderEmail': 'asha@playkers.dev',
        'senderPhone': '555-0101',
        'type': 'match_request',
        'matchType': 'League',
        'team1Id': 'team-asha',
        'team2Id': 'team-bob',
        'sport': 'football',
        'location': 'Central Turf',
    }
    payload.update(extra)
    return payload


def test_create_validates_sender_fields(client):
    res = client.post('/api/notifications', json={'senderName': 'A', 'senderEmail': 'nope', 'senderPhone': '1'})
    assert res.status_code == 400
    res = client.post('/api/notifications', json=request_payload('user-x', type='party_invite'))
    assert res.status_code == 400


def test_player_recipient_resolves_to_linked_user(flask_app, make_user, client):
    from playkers import db
    bob, _ = make_user('bob@playkers.dev')
    with flask_app.app_context():
        player = Player(name='Bob', email='bob@playkers.dev', user_id=bob['id'])
        db.session.add(player)
        db.session.commit()
        player_id = player.id

    payload = request_payload(None, recipientPlayerId=player_id)
    del payload['recipientUserId']
    res = client.post('/api/notifications', json=payload)
    assert res.status_code == 201
    assert res.get_json()['recipientUserId'] == bob['id']
    assert res.get_json()['status'] == 'unread'


def test_list_count_and_mark_all_read(make_user, client):
    bob, bob_client = make_user('bob@playkers.dev')
    for _ in range(3):
        client.post('/api/notifications', json=request_payload(bob['id']))

    assert bob_client.get('/api/notifications/unread-count').get_json() == {'count': 3}
    assert len(bob_client.get('/api/notifications?status=unread').get_json()) == 3

    res = bob_client.patch('/api/notifications/mark-all-read')
    assert res.get_json()['updated'] == 3
    assert bob_client.get('/api/notifications/unread-count').get_json() == {'count': 0}
    assert all(n['readAt'] for n in bob_client.get('/api/notifications').get_json())


def test_status_update_is_recipient_scoped(make_user, client):
    bob, bob_client = make_user('bob@playkers.dev')
    _, eve_client = make_user('eve@playkers.dev')
    notification = client.post('/api/notifications', json=request_payload(bob['id'])).get_json()

    assert eve_client.patch(f"/api/notifications/{notification['id']}/status", json={'status': 'read'}).status_code == 404
    assert bob_client.patch(f"/api/notifications/{notification['id']}/status", json={'status': 'archived'}).status_code == 400
    res = bob_client.patch(f"/api/notifications/{notification['id']}/status", json={'status': 'read'})
    assert res.get_json()['status'] == 'read'


def test_status_has_no_transition_table(make_user, client):
    bob, bob_client = make_user('bob@playkers.dev')
    notification = client.post('/api/notifications', json=request_payload(bob['id'])).get_json()
    url = f"/api/notifications/{notification['id']}/status"
    assert bob_client.patch(url, json={'status': 'accepted'}).get_json()['status'] == 'accepted'
    assert bob_client.patch(url, json={'status': 'read'}).get_json()['status'] == 'read'


def test_accept_returns_swapped_match_request_data(flask_app, make_user):
    asha, asha_client = make_user('asha@playkers.dev')
    bob, bob_client = make_user('bob@playkers.dev')
    notification = asha_client.post('/api/notifications', json=request_payload(bob['id'])).get_json()

    res = bob_client.post(f"/api/notifications/{notification['id']}/accept")
    assert res.status_code == 200
    body = res.get_json()
    assert body['status'] == 'accepted'
    assert body['matchRequestData'] == {
        'team1Id': 'team-bob',
        'team2Id': 'team-asha',
        'matchType': 'League',
        'sport': 'football',
    }

    # The sender hears back and now has a player profile
    replies = asha_client.get('/api/notifications').get_json()
    assert len(replies) == 1
    assert 'accepted your match request' in replies[0]['message']
    with flask_app.app_context():
        assert Player.query.filter_by(email='asha@playkers.dev').count() == 1


def test_accept_defaults_match_type_and_sport(make_user, client):
    bob, bob_client = make_user('bob@playkers.dev')
    payload = request_payload(bob['id'])
    del payload['matchType']
    del payload['sport']
    notification = client.post('/api/notifications', json=payload).get_json()
    data = bob_client.post(f"/api/notifications/{notification['id']}/accept").get_json()['matchRequestData']
    assert data['matchType'] == 'Friendly'
    assert data['sport'] == 'cricket'


def test_decline_notifies_sender(make_user):
    asha, asha_client = make_user('asha@playkers.dev')
    bob, bob_client = make_user('bob@playkers.dev')
    notification = asha_client.post('/api/notifications', json=request_payload(bob['id'])).get_json()

    res = bob_client.patch(f"/api/notifications/{notification['id']}/status", json={'status': 'declined'})
    assert res.get_json()['status'] == 'declined'
    replies = asha_client.get('/api/notifications').get_json()
    assert [r['message'] for r in replies] == ['Bob declined your match request.']


def test_accept_booking_requires_booking_request(make_user, client):
    bob, bob_client = make_user('bob@playkers.dev')
    notification = client.post('/api/notifications', json=request_payload(bob['id'])).get_json()
    assert bob_client.post(f"/api/notifications/{notification['id']}/accept-booking").status_code == 404


def test_delete(flask_app, make_user, client):
    bob, bob_client = make_user('bob@playkers.dev')
    notification = client.post('/api/notifications', json=request_payload(bob['id'])).get_json()
    assert bob_client.delete(f"/api/notifications/{notification['id']}").status_code == 200
    with flask_app.app_context():
        assert Notification.query.count() == 0
