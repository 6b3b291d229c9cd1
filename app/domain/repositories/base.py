"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import Any, Optional, Protocol, TypeVar
from uuid import UUID

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for single-row CRUD operations keyed by UUID."""

    def get_by_id(self, id: UUID) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    def create(self, obj_in: Any) -> T:
        """Create a new entity."""
        ...

    def update(self, db_obj: T, obj_in: Any) -> T:
        """Update an existing entity."""
        ...
