"""Data sources and connection helpers for SQLTemplate."""

from .manager import (
    Connection,
    DatabaseManager,
    PoolConfig,
    RealDictCursor,
)
from .utils import (
    get_connection,
    is_auto_commit,
    release_connection,
)

__all__ = [
    "Connection",
    "DatabaseManager",
    "PoolConfig",
    "RealDictCursor",
    "get_connection",
    "is_auto_commit",
    "release_connection",
]
