import pytest


def _events(client, name):
    return [event['args'][0] for event in client.get_received() if event['name'] == name]


@pytest.fixture
def connect(app, socketio, make_token):
    clients = []

    def _connect(user_key):
        c = socketio.test_client(app, auth={'token': make_token(user_key)})
        clients.append(c)
        return c

    yield _connect
    for c in clients:
        if c.is_connected():
            c.disconnect()


def test_connect_requires_valid_token(app, socketio):
    client = socketio.test_client(app, auth={'token': 'bad.token.value'})
    assert not client.is_connected()


def test_connected_event(connect):
    alice = connect('alice')
    assert alice.is_connected()
    assert _events(alice, 'connected')[0]['userKey'] == 'alice'


def test_open_conversation_receives_live_messages(connect):
    alice = connect('alice')
    bob = connect('bob')
    alice.get_received()
    bob.get_received()

    page = bob.emit('chat:open', {'with': 'alice'}, callback=True)
    assert page['messages'] == [] and page['hasMore'] is False

    alice.emit('chat:send', {'to': 'bob', 'text': 'hello', 'tempId': 't1'})

    sent = _events(alice, 'chat:message:sent')
    assert sent[0]['tempId'] == 't1'
    assert sent[0]['message']['readBy'] == ['alice']

    bob_received = bob.get_received()
    messages = [e['args'][0] for e in bob_received if e['name'] == 'chat:message']
    rooms = [e['args'][0] for e in bob_received if e['name'] == 'chat:rooms']
    assert [m['text'] for m in messages] == ['hello']
    assert rooms[0]['lastMessage'] == 'hello'


def test_message_sent_while_opening_is_not_lost(connect, monkeypatch):
    from rehab_server.messaging.service import ChatService
    from rehab_server.security.session import Session

    bob = connect('bob')
    bob.get_received()
    read_history = ChatService.get_history

    def history_then_send(self, session, other_user_key, *args, **kwargs):
        page = read_history(self, session, other_user_key, *args, **kwargs)
        self.send_message(Session('alice'), 'bob', 'in-between')
        return page

    monkeypatch.setattr(ChatService, 'get_history', history_then_send)
    page = bob.emit('chat:open', {'with': 'alice'}, callback=True)

    live = [m['text'] for m in _events(bob, 'chat:message')]
    in_page = [m['text'] for m in page['messages']]
    assert 'in-between' in in_page + live


def test_read_and_react_push_updates(connect):
    alice = connect('alice')
    bob = connect('bob')
    alice.emit('chat:open', {'with': 'bob'}, callback=True)
    alice.emit('chat:send', {'to': 'bob', 'text': 'hello'})
    key = _events(alice, 'chat:message:sent')[0]['message']['id']

    ack = bob.emit('chat:read', {'with': 'alice'}, callback=True)
    assert ack == {'updated': 1}
    assert bob.emit('chat:read', {'with': 'alice'}, callback=True) == {'updated': 0}

    bob.emit('chat:react', {'with': 'alice', 'messageKey': key, 'reaction': 'Y'}, callback=True)
    updates = _events(alice, 'chat:message:updated')
    assert updates[0]['readBy'] == ['alice', 'bob']
    assert updates[-1]['reactions'] == {'bob': 'Y'}


def test_typing_pushed_to_open_conversation(connect):
    alice = connect('alice')
    bob = connect('bob')
    bob.emit('chat:open', {'with': 'alice'}, callback=True)
    bob.get_received()

    alice.emit('chat:typing', {'isTyping': True})
    typing = _events(bob, 'chat:typing')
    assert typing[0]['userId'] == 'alice' and typing[0]['isTyping'] is True


def test_close_stops_conversation_updates(connect):
    alice = connect('alice')
    bob = connect('bob')
    bob.emit('chat:open', {'with': 'alice'}, callback=True)
    bob.emit('chat:close', callback=True)
    bob.get_received()

    alice.emit('chat:send', {'to': 'bob', 'text': 'hello'})
    names = [e['name'] for e in bob.get_received()]
    assert 'chat:message' not in names
    assert 'chat:rooms' in names


def test_errors_reported_to_caller(connect):
    alice = connect('alice')
    alice.get_received()
    alice.emit('chat:send', {'to': 'bob', 'text': '', 'tempId': 't9'})
    errors = _events(alice, 'chat:error')
    assert errors == [{'code': 'INVALID_DATA', 'message': 'message text or media is required', 'tempId': 't9'}]


def test_disconnect_releases_subscriptions(connect, hub):
    alice = connect('alice')
    alice.emit('chat:open', {'with': 'bob'}, callback=True)
    assert hub.subscriber_count('user_chat_rooms/alice') == 1
    assert hub.subscriber_count('messages/alice_bob') == 1

    alice.disconnect()
    assert hub.subscriber_count('user_chat_rooms/alice') == 0
    assert hub.subscriber_count('messages/alice_bob') == 0
    assert hub.subscriber_count('typing/bob') == 0


def test_debounced_search_emits_latest_results(connect, client, auth_headers, fake_timer):
    client.post('/api/listings', json={
        'title': 'Resistance Bands', 'description': 'bands', 'price': 15, 'category': 'Exercise'
    }, headers=auth_headers('vendor'))
    alice = connect('alice')
    alice.get_received()

    alice.emit('search:query', {'q': 'band'}, callback=True)
    ack = alice.emit('search:query', {'q': 'bands'}, callback=True)
    assert ack == {'generation': 2}

    timers = fake_timer.created
    assert timers[-2].cancelled and not timers[-1].cancelled
    timers[-1].fire()

    results = _events(alice, 'search:results')
    assert len(results) == 1
    assert results[0]['generation'] == 2
    assert [r['title'] for r in results[0]['results']] == ['Resistance Bands']


def test_autocomplete_is_immediate(connect, client, auth_headers):
    client.post('/api/listings', json={
        'title': 'Massage Table', 'description': 'portable', 'price': 30, 'category': 'Furniture'
    }, headers=auth_headers('vendor'))
    alice = connect('alice')
    alice.get_received()
    alice.emit('search:autocomplete', {'q': 'table'})
    assert _events(alice, 'search:suggestions') == [{'query': 'table', 'suggestions': ['Massage Table']}]
