from __future__ import annotations

import hashlib
import hmac

from salon_import.services.ports import BlindIndex


def make_blind_index(key: str) -> BlindIndex:
    """HMAC-SHA256 blind index over normalized phone digits.

    The production deployment injects its own primitive; this one only has to
    agree with itself for local runs and fixtures.
    """

    secret = key.encode("utf-8")

    def blind_index(plaintext: str) -> str:
        return hmac.new(secret, plaintext.encode("utf-8"), hashlib.sha256).hexdigest()

    return blind_index
