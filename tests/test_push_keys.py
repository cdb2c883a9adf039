from rehab_server.utils.generator import PUSH_CHARS, generate_push_key


def test_alphabet_is_ascii_ordered():
    assert list(PUSH_CHARS) == sorted(PUSH_CHARS)
    assert len(PUSH_CHARS) == 64


def test_keys_are_twenty_chars():
    assert len(generate_push_key()) == 20


def test_keys_increase_within_same_millisecond():
    now = 4_000_000_000_000
    keys = [generate_push_key(now) for _ in range(50)]
    assert keys == sorted(keys)
    assert len(set(keys)) == 50


def test_keys_never_go_backwards_with_clock():
    first = generate_push_key(4_100_000_000_000)
    earlier = generate_push_key(4_000_000_000_000)
    assert earlier > first


def test_later_time_sorts_after():
    a = generate_push_key(4_200_000_000_000)
    b = generate_push_key(4_200_000_000_001)
    assert b > a
    assert b[:8] > a[:8]
