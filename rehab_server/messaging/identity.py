"""Two-party chat room identity."""

ROOM_ID_SEPARATOR = '_'


def resolve_room_id(user_a: str, user_b: str) -> str:
    """Deterministic room id for an unordered pair of users.

    resolve_room_id(a, b) == resolve_room_id(b, a); the id can always be
    recomputed from the participants, so no lookup index is stored.
    """
    return ROOM_ID_SEPARATOR.join(sorted([user_a, user_b]))


def room_participants(user_a: str, user_b: str) -> list:
    return sorted([user_a, user_b])
