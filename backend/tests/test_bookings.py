BOOKING = {
    'startTime': '2026-05-02T18:00:00Z',
    'endTime': '2026-05-02T20:00:00Z',
    'totalAmount': 1200,
    'bookerPlace': 'Adyar',
    'preferredTiming': 'Evening',
}


def book(test_client, venue_id, **overrides):
    return test_client.post('/api/bookings', json={'venueId': venue_id, **BOOKING, **overrides})


def test_booking_notifies_venue_owner(venue_owner, make_user):
    owner, owner_client, venue_id = venue_owner
    booker, booker_client = make_user('booker@playkers.dev', phoneNumber='555-0199')

    res = book(booker_client, venue_id)
    assert res.status_code == 201
    booking = res.get_json()
    assert booking['status'] == 'pending'
    assert booking['userId'] == booker['id']
    assert booking['totalAmount'] == '1200'

    inbox = owner_client.get('/api/notifications').get_json()
    assert len(inbox) == 1
    request = inbox[0]
    assert request['type'] == 'booking_request'
    assert request['bookingId'] == booking['id']
    assert request['senderPhone'] == '555-0199'
    assert request['location'] == 'Central Turf'


def test_booking_validation(venue_owner, make_user):
    _, _, venue_id = venue_owner
    _, booker_client = make_user('booker@playkers.dev')
    assert book(booker_client, 'venue-missing').status_code == 404
    assert book(booker_client, venue_id, startTime='tomorrow').status_code == 400
    assert book(booker_client, venue_id, endTime='2026-05-02T17:00:00Z').status_code == 400


def test_list_own_bookings(venue_owner, make_user):
    _, _, venue_id = venue_owner
    _, booker_client = make_user('booker@playkers.dev')
    _, other_client = make_user('other@playkers.dev')
    book(booker_client, venue_id)
    assert len(booker_client.get('/api/bookings').get_json()) == 1
    assert other_client.get('/api/bookings').get_json() == []


def test_only_owner_updates_status(venue_owner, make_user):
    _, owner_client, venue_id = venue_owner
    _, booker_client = make_user('booker@playkers.dev')
    booking = book(booker_client, venue_id).get_json()
    url = f"/api/bookings/{booking['id']}/status"

    assert booker_client.patch(url, json={'status': 'confirmed'}).status_code == 403
    assert owner_client.patch(url, json={'status': 'done'}).status_code == 400
    res = owner_client.patch(url, json={'status': 'confirmed'})
    assert res.status_code == 200
    assert res.get_json()['status'] == 'confirmed'

    accepted = booker_client.get('/api/notifications').get_json()
    assert [n['type'] for n in accepted] == ['booking_accepted']
    assert accepted[0]['message'] == 'Your booking for Central Turf has been accepted!'


def test_accept_booking_from_notification(venue_owner, make_user):
    _, owner_client, venue_id = venue_owner
    _, booker_client = make_user('booker@playkers.dev')
    booking = book(booker_client, venue_id).get_json()
    request = owner_client.get('/api/notifications').get_json()[0]

    res = owner_client.post(f"/api/notifications/{request['id']}/accept-booking")
    assert res.status_code == 200
    body = res.get_json()
    assert body['booking']['id'] == booking['id']
    assert body['booking']['status'] == 'confirmed'
    assert body['notification']['status'] == 'accepted'

    booker_inbox = booker_client.get('/api/notifications').get_json()
    assert [(n['type'], n['bookingId']) for n in booker_inbox] == [('booking_accepted', booking['id'])]
