"""Database access for Workwell services.

Provides connection pooling, repository base classes, the collaborator
contracts the engines depend on, and an in-memory backend.
"""

from .connection import (
    DatabaseConfig,
    ConnectionManager,
    get_connection_manager,
)
from .repository import (
    BaseRepository,
    RepositoryError,
    DuplicateError,
)
from .protocols import (
    SubmissionSource,
    TenantDirectory,
    RiskStore,
    MeasureStore,
)
from .memory_backend import InMemoryBackend

__all__ = [
    "DatabaseConfig",
    "ConnectionManager",
    "get_connection_manager",
    "BaseRepository",
    "RepositoryError",
    "DuplicateError",
    "SubmissionSource",
    "TenantDirectory",
    "RiskStore",
    "MeasureStore",
    "InMemoryBackend",
]
