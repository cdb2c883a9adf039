import random
import threading
import time

# ASCII-ordered so that comparing two keys as strings compares issue order.
PUSH_CHARS = '-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz'

_push_lock = threading.Lock()
_last_push_ms = -1
_last_rand_chars = [0] * 12


def get_current_timestamp_ms():
    """Server clock in epoch milliseconds; the only timestamp source for stored records."""
    return int(time.time() * 1000)


def generate_key(length):
    return ''.join(random.choices('0123456789', k=length))


def generate_push_key(now_ms=None):
    """Return a 20-character key that sorts after every key issued before it.

    The first 8 characters encode the millisecond timestamp; the remaining 12
    are random, and are incremented instead of re-rolled when two keys are
    requested in the same millisecond.
    """
    global _last_push_ms
    with _push_lock:
        if now_ms is None:
            now_ms = get_current_timestamp_ms()
        # never go backwards, even if the wall clock does
        if now_ms <= _last_push_ms:
            now_ms = _last_push_ms
            for i in range(11, -1, -1):
                if _last_rand_chars[i] != 63:
                    _last_rand_chars[i] += 1
                    break
                _last_rand_chars[i] = 0
        else:
            for i in range(12):
                _last_rand_chars[i] = random.randrange(64)
        _last_push_ms = now_ms

        time_chars = []
        ts = now_ms
        for _ in range(8):
            time_chars.append(PUSH_CHARS[ts % 64])
            ts //= 64
        time_part = ''.join(reversed(time_chars))
        rand_part = ''.join(PUSH_CHARS[i] for i in _last_rand_chars)
        return time_part + rand_part


def generate_listing_id():
    return f"LST-{generate_key(12)}"


def generate_review_id():
    return f"REV-{generate_key(12)}"
