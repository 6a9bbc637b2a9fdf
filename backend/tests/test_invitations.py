from datetime import timedelta

from playkers import db
from playkers.models import Invitation, Player, utcnow


def invite(test_client, **overrides):
    payload = {
        'email': 'guest@example.com',
        'invitationType': 'match',
        'matchType': 'Friendly',
        'matchTitle': 'Evening T20',
    }
    payload.update(overrides)
    return test_client.post('/api/invitations', json=payload)


def backdate(flask_app, invitation_id):
    with flask_app.app_context():
        invitation = db.session.get(Invitation, invitation_id)
        invitation.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()


def stored(flask_app, model, object_id):
    with flask_app.app_context():
        return db.session.get(model, object_id)


def test_issue_returns_link_and_token(make_user):
    host, host_client = make_user('host@playkers.dev')
    res = invite(host_client)
    assert res.status_code == 201
    invitation = res.get_json()['invitation']
    assert len(invitation['token']) == 32
    assert invitation['token'].isalnum()
    assert invitation['status'] == 'pending'
    assert invitation['inviterId'] == host['id']
    assert invitation['invitationLink'] == f"http://playkers.test/accept-invite/{invitation['token']}"


def test_issue_validation(make_user):
    _, host_client = make_user('host@playkers.dev')
    assert invite(host_client, email='not-an-email').status_code == 400
    assert invite(host_client, invitationType='party').status_code == 400
    assert invite(host_client, matchType=None).status_code == 400
    assert invite(host_client, invitationType='team', matchType=None).status_code == 400
    assert invite(host_client, invitationType='team', matchType=None, teamId='team-1').status_code == 201


def test_issue_rejects_malformed_domains(make_user):
    _, host_client = make_user('host@playkers.dev')
    for email in ('a@b..c', 'guest@.example.com', 'guest@example..com', 'two@@example.com'):
        res = invite(host_client, email=email)
        assert res.status_code == 400, email
    assert host_client.get('/api/invitations').get_json() == []


def test_list_sent_and_received(make_user):
    _, host_client = make_user('host@playkers.dev')
    _, guest_client = make_user('guest@example.com')
    invite(host_client)
    invite(host_client, email='other@example.com')

    assert len(host_client.get('/api/invitations').get_json()) == 2
    received = guest_client.get('/api/invitations?type=received').get_json()
    assert [i['email'] for i in received] == ['guest@example.com']


def test_guest_accepts_once(flask_app, make_user, client):
    _, host_client = make_user('host@playkers.dev')
    token = invite(host_client).get_json()['invitation']['token']

    assert client.get(f'/api/invitations/token/{token}').get_json()['status'] == 'pending'
    res = client.post(f'/api/invitations/{token}/accept',
                      json={'guestPlayerData': {'name': 'Guest Gita', 'email': 'gita@example.com'}})
    assert res.status_code == 200
    invitation = res.get_json()['invitation']
    assert invitation['status'] == 'accepted'
    guest = stored(flask_app, Player, invitation['acceptedByPlayerId'])
    assert guest.is_guest is True

    again = client.post(f'/api/invitations/{token}/accept',
                        json={'guestPlayerData': {'name': 'Someone', 'email': 'someone@example.com'}})
    assert again.status_code == 400
    assert again.get_json()['error'] == 'Invitation is accepted'
    with flask_app.app_context():
        assert Player.query.filter_by(is_guest=True).count() == 1


def test_guest_data_must_be_an_object(flask_app, make_user, client):
    _, host_client = make_user('host@playkers.dev')
    invitation = invite(host_client).get_json()['invitation']

    for guest_data in ('Guest Gita', ['Guest Gita', 'gita@example.com']):
        res = client.post(f"/api/invitations/{invitation['token']}/accept", json={'guestPlayerData': guest_data})
        assert res.status_code == 400
        assert res.get_json()['error'] == 'guestPlayerData must be an object'
    assert stored(flask_app, Invitation, invitation['id']).status == 'pending'


def test_logged_in_user_accepts_with_own_profile(flask_app, make_user):
    _, host_client = make_user('host@playkers.dev')
    guest, guest_client = make_user('guest@example.com')
    token = invite(host_client, invitationType='team', matchType=None, teamId='team-9').get_json()['invitation']['token']

    invitation = guest_client.post(f'/api/invitations/{token}/accept').get_json()['invitation']
    assert invitation['acceptedByUserId'] == guest['id']
    player = stored(flask_app, Player, invitation['acceptedByPlayerId'])
    assert player.user_id == guest['id']
    assert player.team_id == 'team-9'


def test_revoked_token_cannot_be_accepted(flask_app, make_user, client):
    _, host_client = make_user('host@playkers.dev')
    _, stranger_client = make_user('stranger@playkers.dev')
    invitation = invite(host_client).get_json()['invitation']

    assert stranger_client.delete(f"/api/invitations/{invitation['id']}").status_code == 403
    assert host_client.delete(f"/api/invitations/{invitation['id']}").status_code == 200

    res = client.post(f"/api/invitations/{invitation['token']}/accept",
                      json={'guestPlayerData': {'name': 'Late', 'email': 'late@example.com'}})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Invitation is revoked'
    assert stored(flask_app, Invitation, invitation['id']).status == 'revoked'


def test_expired_token_answers_410(flask_app, make_user, client):
    _, host_client = make_user('host@playkers.dev')
    invitation = invite(host_client).get_json()['invitation']
    backdate(flask_app, invitation['id'])

    assert client.get(f"/api/invitations/token/{invitation['token']}").status_code == 410
    res = client.post(f"/api/invitations/{invitation['token']}/accept",
                      json={'guestPlayerData': {'name': 'Late', 'email': 'late@example.com'}})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Invitation is expired'


def test_accept_past_due_pending_expires_it(flask_app, make_user, client):
    _, host_client = make_user('host@playkers.dev')
    invitation = invite(host_client).get_json()['invitation']
    backdate(flask_app, invitation['id'])

    res = client.post(f"/api/invitations/{invitation['token']}/accept", json={})
    assert res.status_code == 410
    assert stored(flask_app, Invitation, invitation['id']).status == 'expired'


def test_unknown_token_is_404(client):
    assert client.get('/api/invitations/token/nope').status_code == 404
    assert client.post('/api/invitations/nope/accept', json={}).status_code == 404


def test_expire_invitations_command(flask_app, make_user):
    _, host_client = make_user('host@playkers.dev')
    stale = invite(host_client).get_json()['invitation']
    fresh = invite(host_client, email='fresh@example.com').get_json()['invitation']
    backdate(flask_app, stale['id'])

    result = flask_app.test_cli_runner().invoke(args=['expire-invitations'])
    assert result.exit_code == 0
    assert 'Expired 1 invitation(s).' in result.output

    assert stored(flask_app, Invitation, stale['id']).status == 'expired'
    assert stored(flask_app, Invitation, fresh['id']).status == 'pending'
