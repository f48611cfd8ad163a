from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class DatabasePort(Protocol):
    """
    Object database contract consumed by the write pipeline.

    `options` may carry `acl` (the caller's read/write set; absent for master
    access) and `limit`. The database, not the pipeline, enforces ACLs.
    """

    async def collection_exists(self, class_name: str) -> bool:
        """Whether the class already has a schema or rows."""

    async def validate_object(
        self, class_name: str, data: Dict[str, Any], query: Optional[Dict[str, Any]], options: Dict[str, Any]
    ) -> None:
        """Raise a typed error when `data` does not fit the class schema."""

    async def find(
        self, class_name: str, query: Dict[str, Any], options: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Objects of `class_name` matching `query`."""

    async def create(self, class_name: str, data: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> None:
        """Insert a new object; `data` carries its `objectId`."""

    async def update(
        self,
        class_name: str,
        query: Dict[str, Any],
        data: Dict[str, Any],
        options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Apply `data` to the object matching `query`; return server-computed fields."""

    async def destroy(self, class_name: str, query: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> None:
        """Delete all objects matching `query` (best effort)."""
