"""
Configuration module for GeoCache.

Centralizes configuration with environment variable support and builds the
configured store and randomness provider.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from .randomness import RandomSource, SeededRandomSource, SystemRandomSource
from .store import InMemoryStateStore, SqliteStateStore, StateStore

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("GEOCACHE_ENV", "dev")  # dev|stage|prod

# Store backend: memory|sqlite
STORE_BACKEND = os.getenv("GEOCACHE_STORE", "memory")
DB_PATH = os.getenv("GEOCACHE_DB_PATH", "data/geocache.db")

# Deterministic randomness for replicated hosts (unset = OS entropy)
RANDOM_SEED = os.getenv("GEOCACHE_RANDOM_SEED", "")

# Logging
LOG_LEVEL = os.getenv("GEOCACHE_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("GEOCACHE_LOG_JSON", "true").lower() in ("1", "true", "yes")

STORE_BACKENDS = ("memory", "sqlite")


# ============================================================
# Collaborator Builders
# ============================================================

@lru_cache(maxsize=1)
def get_store() -> StateStore:
    """Build the configured store once per process."""
    if STORE_BACKEND == "sqlite":
        return SqliteStateStore(DB_PATH)
    if STORE_BACKEND == "memory":
        return InMemoryStateStore()
    raise ValueError(f"Unknown GEOCACHE_STORE backend: {STORE_BACKEND}")


def get_random_source(invocation_id: Optional[str] = None) -> RandomSource:
    """
    Build the randomness provider for one invocation.

    With GEOCACHE_RANDOM_SEED set, the source is derived from the seed and
    the invocation id, so replicas given the same id agree on every value.
    The invocation id is then required.
    """
    if RANDOM_SEED:
        return SeededRandomSource.for_invocation(RANDOM_SEED, invocation_id)
    return SystemRandomSource()


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Validate configuration values.
    Returns dict of check name -> passed.
    """
    checks = {
        "store_backend": STORE_BACKEND in STORE_BACKENDS,
        "env": ENV in ("dev", "stage", "prod"),
    }
    if STORE_BACKEND == "sqlite":
        parent = Path(DB_PATH).parent
        checks["db_path"] = not parent.exists() or os.access(parent, os.W_OK)
    if is_production():
        checks["memory_store_in_prod"] = STORE_BACKEND != "memory"
    return checks


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("GEOCACHE_DEBUG", "").lower() in ("1", "true", "yes")


def log_level() -> str:
    """Effective log level: DEBUG in debug mode, GEOCACHE_LOG_LEVEL otherwise."""
    return "DEBUG" if is_debug() else LOG_LEVEL
