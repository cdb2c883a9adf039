import pytest

from rehab_server.messaging.identity import resolve_room_id, room_participants


@pytest.mark.parametrize('a,b', [
    ('alice', 'bob'),
    ('bob', 'alice'),
    ('uid-9', 'uid-10'),
    ('Zed', 'adam'),
])
def test_room_id_is_symmetric(a, b):
    assert resolve_room_id(a, b) == resolve_room_id(b, a)


def test_room_id_sorts_and_joins():
    assert resolve_room_id('bob', 'alice') == 'alice_bob'
    assert room_participants('bob', 'alice') == ['alice', 'bob']


def test_distinct_pairs_get_distinct_rooms():
    assert resolve_room_id('alice', 'bob') != resolve_room_id('alice', 'carol')
