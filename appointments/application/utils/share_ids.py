from __future__ import annotations

import secrets
from typing import Callable

from appointments.application.exceptions import ShareIdExhaustedError

SHARE_ID_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
SHARE_ID_LENGTH = 12
MAX_ATTEMPTS = 6


def generate_share_id() -> str:
    return "".join(secrets.choice(SHARE_ID_ALPHABET) for _ in range(SHARE_ID_LENGTH))


def generate_unique_share_id(exists: Callable[[str], bool]) -> str:
    for _ in range(MAX_ATTEMPTS):
        candidate = generate_share_id()
        if not exists(candidate):
            return candidate
    raise ShareIdExhaustedError("Unable to generate unique calendar share id")
