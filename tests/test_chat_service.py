import pytest

from rehab_server.exception import UnauthorizedError, ForbiddenError, NotFoundError
from rehab_server.messaging.identity import resolve_room_id
from rehab_server.messaging.models import MediaType
from rehab_server.messaging.service import ChatService


@pytest.fixture
def chat(repos, hub, clock):
    return ChatService(repositories=repos, hub=hub, clock=clock)


def _send_many(chat, clock, sender, to, count):
    sent = []
    for i in range(count):
        clock.advance()
        sent.append(chat.send_message(sender, to, f'msg {i}'))
    return sent


def test_first_message_creates_room_and_inbox_entries(chat, repos, alice, bob, clock):
    message = chat.send_message(alice, 'bob', 'hello')

    room_id = resolve_room_id('alice', 'bob')
    assert message.room_id == room_id
    room = repos.chat_room.get(room_id)
    assert room['participants'] == ['alice', 'bob']
    assert room['last_message'] == 'hello'

    stored = repos.message.fetch_all(room_id)
    assert len(stored) == 1
    assert stored[0]['read_by'] == ['alice']
    assert stored[0]['timestamp'] == clock.now_ms

    for user_key in ('alice', 'bob'):
        entry = repos.user_chat_rooms.get(user_key, room_id)
        assert entry['last_message'] == 'hello'
        assert entry['last_message_timestamp'] == clock.now_ms


def test_send_requires_session(chat):
    with pytest.raises(UnauthorizedError):
        chat.send_message(None, 'bob', 'hello')


def test_send_requires_text_or_media(chat, alice):
    with pytest.raises(ValueError):
        chat.send_message(alice, 'bob', '   ')


def test_send_to_self_rejected(chat, alice):
    with pytest.raises(ValueError):
        chat.send_message(alice, 'alice', 'hi me')


def test_media_message_without_text(chat, repos, alice):
    message = chat.send_message(alice, 'bob', media_url='/api/media/chat_media/1_a.png', media_type='image')
    assert message.media_type == MediaType.IMAGE
    entry = repos.user_chat_rooms.get('bob', message.room_id)
    assert entry['last_message'] == '[image]'


def test_unknown_media_type_rejected(chat, alice):
    with pytest.raises(ValueError):
        chat.send_message(alice, 'bob', 'x', media_url='/m', media_type='hologram')


def test_keys_increase_in_send_order(chat, alice, bob, clock):
    sent = _send_many(chat, clock, alice, 'bob', 5)
    keys = [m.key for m in sent]
    assert keys == sorted(keys)


@pytest.mark.parametrize('count,page_size', [(0, 20), (1, 20), (20, 20), (21, 20), (45, 20), (7, 3), (9, 3)])
def test_paginated_read_matches_full_read(chat, alice, bob, clock, count, page_size):
    _send_many(chat, clock, alice, 'bob', count)
    full = [m.key for m in chat.get_full_history(bob, 'alice')]

    pages = []
    cursor = None
    while True:
        page = chat.get_history(bob, 'alice', cursor=cursor, page_size=page_size)
        assert len(page.messages) <= page_size
        pages.insert(0, [m.key for m in page.messages])
        if not page.has_more:
            break
        cursor = page.next_cursor

    paged = [key for chunk in pages for key in chunk]
    assert paged == full
    assert len(set(paged)) == count


def test_page_is_chronological_and_cursor_is_next_page_top(chat, alice, bob, clock):
    sent = _send_many(chat, clock, alice, 'bob', 5)
    first = chat.get_history(alice, 'bob', page_size=2)
    assert [m.key for m in first.messages] == [sent[3].key, sent[4].key]
    assert first.next_cursor == sent[2].key

    second = chat.get_history(alice, 'bob', cursor=first.next_cursor, page_size=2)
    assert [m.key for m in second.messages] == [sent[1].key, sent[2].key]
    assert second.messages[-1].key == first.next_cursor


def test_mark_read_is_idempotent(chat, repos, alice, bob, clock):
    sent = _send_many(chat, clock, alice, 'bob', 3)

    assert chat.mark_read(bob, 'alice') == 3
    after_first = [doc['read_by'] for doc in repos.message.fetch_all(sent[0].room_id)]
    assert after_first == [['alice', 'bob']] * 3

    assert chat.mark_read(bob, 'alice') == 0
    after_second = [doc['read_by'] for doc in repos.message.fetch_all(sent[0].room_id)]
    assert after_second == after_first


def test_mark_read_skips_own_messages(chat, repos, alice, bob):
    message = chat.send_message(alice, 'bob', 'mine')
    assert chat.mark_read(alice, 'bob', [message.key]) == 0
    assert repos.message.get(message.room_id, message.key)['read_by'] == ['alice']


def test_unread_count(chat, alice, bob, clock):
    _send_many(chat, clock, alice, 'bob', 4)
    assert chat.unread_count(bob, 'alice') == 4
    assert chat.unread_count(alice, 'bob') == 0
    chat.mark_read(bob, 'alice')
    assert chat.unread_count(bob, 'alice') == 0


def test_reaction_last_write_wins(chat, repos, alice, bob):
    message = chat.send_message(alice, 'bob', 'hello')
    chat.react(bob, 'alice', message.key, 'X')
    chat.react(bob, 'alice', message.key, 'Y')

    stored = repos.message.get(message.room_id, message.key)
    assert stored['reactions'] == {'bob': 'Y'}


def test_reactions_are_per_user(chat, alice, bob):
    message = chat.send_message(alice, 'bob', 'hello')
    chat.react(bob, 'alice', message.key, '👍')
    updated = chat.react(alice, 'bob', message.key, '❤')
    assert updated.reactions == {'bob': '👍', 'alice': '❤'}


def test_empty_reaction_rejected(chat, alice, bob):
    message = chat.send_message(alice, 'bob', 'hello')
    with pytest.raises(ValueError):
        chat.react(bob, 'alice', message.key, '  ')


def test_reaction_on_unknown_message(chat, alice, bob):
    chat.send_message(alice, 'bob', 'hello')
    with pytest.raises(NotFoundError):
        chat.react(bob, 'alice', 'no-such-key', 'X')


def test_inbox_sorted_by_latest_activity(chat, alice, bob, carol, clock):
    clock.advance(10)
    chat.send_message(alice, 'bob', 'to bob')
    clock.advance(10)
    chat.send_message(alice, 'carol', 'to carol')
    clock.advance(10)
    chat.send_message(bob, 'alice', 'bob again')

    inbox = chat.list_inbox(alice)
    assert [s.other_participant for s in inbox] == ['bob', 'carol']
    assert inbox[0].last_message == 'bob again'

    assert [s.other_participant for s in chat.list_inbox(carol)] == ['alice']


def test_typing_flag_expires(chat, alice, clock):
    chat.set_typing(alice, True)
    assert chat.is_typing('alice') is True

    clock.advance(4999)
    assert chat.is_typing('alice') is True
    clock.advance(1)
    assert chat.is_typing('alice') is False
    # the raw flag is still stored as true
    assert chat.get_typing('alice').is_typing is True


def test_typing_cleared(chat, alice):
    chat.set_typing(alice, True)
    chat.set_typing(alice, False)
    assert chat.is_typing('alice') is False


def test_unknown_user_not_typing(chat):
    assert chat.typing_status('nobody') == {'userId': 'nobody', 'isTyping': False, 'timestamp': 0}


def test_typing_status_limited_to_conversation_partners(chat, alice, bob, carol):
    chat.set_typing(alice, True)
    with pytest.raises(ForbiddenError):
        chat.typing_status_for(bob, 'alice')

    chat.send_message(alice, 'bob', 'hi')
    assert chat.typing_status_for(bob, 'alice')['isTyping'] is True
    assert chat.typing_status_for(alice, 'alice')['isTyping'] is True
    with pytest.raises(ForbiddenError):
        chat.typing_status_for(carol, 'alice')


def test_message_subscription_receives_new_and_updated(chat, alice, bob):
    received = []
    with chat.subscribe_messages(bob, 'alice', lambda topic, payload: received.append(payload)):
        message = chat.send_message(alice, 'bob', 'hello')
        chat.react(bob, 'alice', message.key, 'X')
    chat.send_message(alice, 'bob', 'after close')

    assert [p['event'] for p in received] == ['message', 'message_updated']
    assert received[0]['message']['text'] == 'hello'
    assert received[1]['message']['reactions'] == {'bob': 'X'}


def test_inbox_subscription_for_both_participants(chat, alice, bob):
    seen = {'alice': [], 'bob': []}
    alice_sub = chat.subscribe_inbox(alice, lambda t, p: seen['alice'].append(p))
    bob_sub = chat.subscribe_inbox(bob, lambda t, p: seen['bob'].append(p))

    chat.send_message(alice, 'bob', 'hello')
    alice_sub.close()
    bob_sub.close()

    assert seen['alice'][0]['otherUserId'] == 'bob'
    assert seen['bob'][0]['otherUserId'] == 'alice'
    assert seen['bob'][0]['lastMessage'] == 'hello'


def test_typing_subscription(chat, alice, bob):
    received = []
    with chat.subscribe_typing(bob, 'alice', lambda t, p: received.append(p)):
        chat.set_typing(alice, True)
    assert received == [{'userId': 'alice', 'isTyping': True, 'timestamp': received[0]['timestamp']}]


def test_subscriptions_require_session(chat):
    with pytest.raises(UnauthorizedError):
        chat.subscribe_inbox(None, lambda t, p: None)


def test_directory_write_failure_keeps_message(chat, repos, alice, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError('directory unavailable')

    monkeypatch.setattr(repos.user_chat_rooms, 'update_summary', boom)
    with pytest.raises(RuntimeError):
        chat.send_message(alice, 'bob', 'hello')

    room_id = resolve_room_id('alice', 'bob')
    assert [doc['text'] for doc in repos.message.fetch_all(room_id)] == ['hello']
