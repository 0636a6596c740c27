"""Short task identifiers."""

import secrets
import string
import uuid

ID_ALPHABET = string.ascii_lowercase + string.digits
MIN_ID_LENGTH = 3
MAX_ID_LENGTH = 10
ATTEMPTS_PER_LENGTH = 25


def generate_short_id(existing_ids: set[str]) -> str:
    """Return a new lowercase id not in existing_ids and reserve it there.

    Tries random strings of growing length (3..10 chars) before falling
    back to a uuid4 hex string. Callers must keep existing_ids lowercased.
    """
    for length in range(MIN_ID_LENGTH, MAX_ID_LENGTH + 1):
        for _ in range(ATTEMPTS_PER_LENGTH):
            candidate = ''.join(secrets.choice(ID_ALPHABET) for _ in range(length))
            if candidate not in existing_ids:
                existing_ids.add(candidate)
                return candidate

    fallback = uuid.uuid4().hex
    while fallback in existing_ids:
        fallback = uuid.uuid4().hex
    existing_ids.add(fallback)
    return fallback
