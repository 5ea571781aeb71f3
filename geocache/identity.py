"""
GeoCache Identity Commitment

An owner's raw identifier is never persisted. A record stores only

    commitment = hex(H^100(raw_id || salt))

together with the salt, where H is SHA-1 and H^100 feeds each digest
back into the hash for 100 applications in total. Ownership is checked by
recomputing the commitment from the caller's raw id and the stored salt.
"""

import hashlib
import hmac
from typing import Optional

from .randomness import DEFAULT_LENGTH, RandomSource, SystemRandomSource


HASH_ROUNDS = 100
SALT_LENGTH = DEFAULT_LENGTH


def stretched_digest(data: bytes, rounds: int = HASH_ROUNDS) -> bytes:
    """Apply SHA-1 `rounds` times, each round hashing the previous raw digest."""
    if rounds < 1:
        raise ValueError("rounds must be at least 1")

    digest = data
    for _ in range(rounds):
        digest = hashlib.sha1(digest).digest()
    return digest


def derive_salt(random: Optional[RandomSource] = None, length: int = SALT_LENGTH) -> str:
    """
    Produce a fresh per-record salt.

    Args:
        random: Randomness provider; a SystemRandomSource when omitted
        length: Number of alphanumeric characters

    Returns:
        Salt string, stored in clear next to the commitment
    """
    source = random or SystemRandomSource()
    return source.random_string(length)


def commit(raw_id: str, salt: str, rounds: int = HASH_ROUNDS) -> str:
    """
    Derive the ownership commitment for a raw identifier and salt.

    Returns:
        Lowercase hex digest (40 characters)
    """
    data = (raw_id + salt).encode("utf-8")
    return stretched_digest(data, rounds).hex()


def verify(raw_id: str, salt: str, commitment: str, rounds: int = HASH_ROUNDS) -> bool:
    """
    Check a caller's raw identifier against a stored commitment.

    Fails closed: any malformed input yields False.
    """
    if not isinstance(raw_id, str) or not isinstance(salt, str) or not isinstance(commitment, str):
        return False
    if not commitment:
        return False

    computed = commit(raw_id, salt, rounds)
    return hmac.compare_digest(computed.encode("utf-8"), commitment.encode("utf-8"))
