"""
GeoCache Randomness Providers

Salts, trackable identifiers and report identifiers are drawn from an
injected RandomSource rather than from a process-wide generator.

- SystemRandomSource: OS entropy via `secrets` (default for single hosts)
- SeededRandomSource: deterministic stream from a host-supplied seed, so
  every replica executing the same invocation derives the same values
"""

import random
import secrets
import string
from abc import ABC, abstractmethod
from typing import Optional, Union


# 0-9, a-z, A-Z
ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase

DEFAULT_LENGTH = 8


class RandomSource(ABC):
    """Abstract provider of random identifier strings."""

    alphabet: str = ALPHABET

    @abstractmethod
    def random_string(self, length: int = DEFAULT_LENGTH) -> str:
        """Return a random string of `length` characters from the alphabet."""
        pass


class SystemRandomSource(RandomSource):
    """Random strings from the operating system's entropy pool."""

    def random_string(self, length: int = DEFAULT_LENGTH) -> str:
        if length < 1:
            raise ValueError("length must be positive")
        return "".join(secrets.choice(self.alphabet) for _ in range(length))


class SeededRandomSource(RandomSource):
    """
    Deterministic random strings from a seed.

    The seed must be supplied by the host per invocation (for example the
    transaction id). Two sources built from the same seed yield the same
    sequence of strings.
    """

    def __init__(self, seed: Union[int, str, bytes]):
        self.seed = seed
        self._rng = random.Random(seed)

    def random_string(self, length: int = DEFAULT_LENGTH) -> str:
        if length < 1:
            raise ValueError("length must be positive")
        return "".join(self._rng.choice(self.alphabet) for _ in range(length))

    @classmethod
    def for_invocation(cls, base_seed: str, invocation_id: Optional[str]) -> "SeededRandomSource":
        """
        Derive a per-invocation source from a deployment seed and invocation id.

        Raises:
            ValueError: no invocation id; a bare deployment seed would hand
                every invocation the same salts and identifiers
        """
        if not invocation_id:
            raise ValueError("a seeded random source needs an invocation id")
        return cls(f"{base_seed}:{invocation_id}")
