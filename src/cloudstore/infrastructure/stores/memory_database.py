from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from cloudstore.infrastructure.stores.document_store import DocumentDatabase


class InMemoryDatabase(DocumentDatabase):
    """Process-local document store (useful for tests and single-node demos)."""

    def __init__(self) -> None:
        self._objects: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._schemas: Dict[str, Dict[str, str]] = {}

    def _all(self, class_name: str) -> List[Dict[str, Any]]:
        return list(self._objects.get(class_name, {}).values())

    def _insert(self, class_name: str, obj: Dict[str, Any]) -> None:
        self._objects.setdefault(class_name, {})[obj["objectId"]] = copy.deepcopy(obj)

    def _replace(self, class_name: str, obj: Dict[str, Any]) -> None:
        self._objects.setdefault(class_name, {})[obj["objectId"]] = copy.deepcopy(obj)

    def _delete(self, class_name: str, object_ids: List[str]) -> None:
        bucket = self._objects.get(class_name, {})
        for object_id in object_ids:
            bucket.pop(object_id, None)

    def _load_schema(self, class_name: str) -> Optional[Dict[str, str]]:
        schema = self._schemas.get(class_name)
        return dict(schema) if schema is not None else None

    def _save_schema(self, class_name: str, fields: Dict[str, str]) -> None:
        self._schemas[class_name] = dict(fields)

    def objects(self, class_name: str) -> List[Dict[str, Any]]:
        """Raw stored rows, including server-only fields."""
        return [copy.deepcopy(o) for o in self._all(class_name)]

    def schema(self, class_name: str) -> Optional[Dict[str, str]]:
        return self._load_schema(class_name)
