import io

import pytest

from rehab_server.repository.media_repository import MediaRepository
from rehab_server.services import media_service
from rehab_server.services.media_service import MediaService
from tests.conftest import FakeFS


@pytest.fixture
def fake_media(monkeypatch):
    service = MediaService(MediaRepository(fs=FakeFS()))
    monkeypatch.setattr(media_service, '_media_service', service)
    return service


def _create_listing(client, headers, **overrides):
    body = {
        'title': 'Resistance Bands',
        'description': 'Set of three bands',
        'price': 15,
        'category': 'Exercise',
        'location': {'lat': 40.7128, 'lng': -74.0060},
    }
    body.update(overrides)
    return client.post('/api/listings', json=body, headers=headers)


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json()['success'] is True
    assert resp.get_json()['env'] == 'development'


def test_missing_token_is_401(client):
    resp = client.get('/api/users/me')
    assert resp.status_code == 401
    assert resp.get_json()['success'] is False


def test_bad_token_is_401(client):
    resp = client.get('/api/users/me', headers={'Authorization': 'Bearer not.a.token'})
    assert resp.status_code == 401


def test_profile_created_on_first_call(client, auth_headers):
    resp = client.get('/api/users/me', headers=auth_headers('alice', 'Alice'))
    assert resp.status_code == 200
    assert resp.get_json()['user']['displayName'] == 'Alice'

    resp = client.put('/api/users/me', json={'location': {'lat': 95, 'lng': 0}}, headers=auth_headers('alice'))
    assert resp.status_code == 400

    resp = client.put('/api/users/me', json={'displayName': 'Al'}, headers=auth_headers('alice'))
    assert resp.get_json()['user']['displayName'] == 'Al'


def test_listing_lifecycle(client, auth_headers):
    resp = _create_listing(client, auth_headers('alice'))
    assert resp.status_code == 201
    listing = resp.get_json()['listing']
    assert listing['vendorId'] == 'alice'
    assert 'bands' in listing['keywords']

    resp = client.put(f"/api/listings/{listing['id']}", json={'price': 20}, headers=auth_headers('bob'))
    assert resp.status_code == 403

    resp = client.put(f"/api/listings/{listing['id']}", json={'price': 20}, headers=auth_headers('alice'))
    assert resp.get_json()['listing']['price'] == 20

    resp = client.get('/api/vendors/alice/listings')
    assert [l['id'] for l in resp.get_json()['listings']] == [listing['id']]

    resp = client.delete(f"/api/listings/{listing['id']}", headers=auth_headers('alice'))
    assert resp.status_code == 200
    assert client.get(f"/api/listings/{listing['id']}").status_code == 404


def test_listing_validation_is_400(client, auth_headers):
    assert _create_listing(client, auth_headers('alice'), price=-1).status_code == 400


def test_search_endpoints(client, auth_headers):
    _create_listing(client, auth_headers('alice'))
    _create_listing(client, auth_headers('alice'), title='Massage Table', description='Portable',
                    category='Furniture', price=30)

    resp = client.get('/api/search?q=bands')
    assert [r['title'] for r in resp.get_json()['results']] == ['Resistance Bands']

    resp = client.get('/api/search?q=bands&lat=40.72&lng=-74.0')
    results = resp.get_json()['results']
    assert len(results) == 1 and results[0]['distanceKm'] < 50

    assert client.get('/api/search?q=bands&lat=40.72').status_code == 400

    resp = client.get('/api/search/autocomplete?q=table')
    assert resp.get_json()['suggestions'] == ['Massage Table']


def test_reviews_endpoints(client, auth_headers):
    listing = _create_listing(client, auth_headers('alice')).get_json()['listing']
    url = f"/api/listings/{listing['id']}/reviews"

    resp = client.post(url, json={'rating': 5, 'comment': 'great'}, headers=auth_headers('bob', 'Bob'))
    assert resp.status_code == 201
    review = resp.get_json()['review']

    assert client.post(url, json={'rating': 9, 'comment': 'x'}, headers=auth_headers('bob')).status_code == 400

    page = client.get(url).get_json()
    assert page['total'] == 1 and page['average_rating'] == 5

    assert client.put(f"/api/reviews/{review['id']}", json={'rating': 1},
                      headers=auth_headers('alice')).status_code == 403
    assert client.delete(f"/api/reviews/{review['id']}", headers=auth_headers('bob')).status_code == 200


def test_chat_endpoints(client, auth_headers):
    resp = client.post('/api/chat/messages', json={'to': 'bob', 'text': 'hello'}, headers=auth_headers('alice'))
    assert resp.status_code == 201
    message = resp.get_json()['message']
    assert message['readBy'] == ['alice']

    rooms = client.get('/api/chat/rooms', headers=auth_headers('bob')).get_json()['rooms']
    assert rooms[0]['otherUserId'] == 'alice'
    assert rooms[0]['lastMessage'] == 'hello'
    assert rooms[0]['unreadCount'] == 1

    history = client.get('/api/chat/rooms/alice/messages', headers=auth_headers('bob')).get_json()
    assert [m['text'] for m in history['messages']] == ['hello']
    assert history['hasMore'] is False

    resp = client.post('/api/chat/rooms/alice/read', json={}, headers=auth_headers('bob'))
    assert resp.get_json()['updated'] == 1

    resp = client.put(f"/api/chat/rooms/alice/messages/{message['id']}/reactions",
                      json={'reaction': '👍'}, headers=auth_headers('bob'))
    assert resp.get_json()['message']['reactions'] == {'bob': '👍'}

    resp = client.put(f"/api/chat/rooms/alice/messages/{message['id']}/reactions",
                      json={'reaction': ''}, headers=auth_headers('bob'))
    assert resp.status_code == 400

    typing = client.get('/api/chat/typing/alice', headers=auth_headers('bob')).get_json()['typing']
    assert typing['isTyping'] is False

    resp = client.get('/api/chat/typing/alice', headers=auth_headers('carol'))
    assert resp.status_code == 403


def test_send_without_recipient(client, auth_headers):
    resp = client.post('/api/chat/messages', json={'text': 'hello'}, headers=auth_headers('alice'))
    assert resp.status_code == 400


def test_history_pagination_over_http(client, auth_headers):
    for i in range(5):
        client.post('/api/chat/messages', json={'to': 'bob', 'text': f'm{i}'}, headers=auth_headers('alice'))

    texts = []
    cursor = ''
    while True:
        page = client.get(f'/api/chat/rooms/alice/messages?limit=2&cursor={cursor}',
                          headers=auth_headers('bob')).get_json()
        texts = [m['text'] for m in page['messages']] + texts
        if not page['hasMore']:
            break
        cursor = page['nextCursor']
    assert texts == ['m0', 'm1', 'm2', 'm3', 'm4']


def test_media_upload_and_download(client, auth_headers, fake_media):
    resp = client.post(
        '/api/chat/media',
        data={'file': (io.BytesIO(b'pixels'), 'photo.png', 'image/png')},
        headers=auth_headers('alice'),
        content_type='multipart/form-data',
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['media_type'] == 'image'

    download = client.get(body['url'])
    assert download.status_code == 200
    assert download.data == b'pixels'
    assert download.mimetype == 'image/png'

    assert client.get('/api/media/chat_media/missing.png').status_code == 404


def test_store_failure_is_503(client, auth_headers, monkeypatch):
    from pymongo.errors import ServerSelectionTimeoutError
    from rehab_server.services.search_service import get_search_service

    service = get_search_service()

    def unavailable(*args, **kwargs):
        raise ServerSelectionTimeoutError('no servers')

    monkeypatch.setattr(service.listings, 'find_by_keyword', unavailable)
    resp = client.get('/api/search?q=bands')
    assert resp.status_code == 503
