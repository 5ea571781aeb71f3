"""
Per-invocation context handed to every contract operation.
"""

import uuid
from dataclasses import dataclass, field

from .randomness import RandomSource, SystemRandomSource
from .store import StateStore


@dataclass
class TransactionContext:
    """
    Explicit collaborators for a single invocation.

    - store: the key-addressed world state
    - random: source for salts and identifiers; a replicated host passes a
      SeededRandomSource derived from a value every replica agrees on
    - invocation_id: correlation id for logs
    """
    store: StateStore
    random: RandomSource = field(default_factory=SystemRandomSource)
    invocation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
