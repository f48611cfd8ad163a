"""
Rich object handle handed to triggers.

Triggers see an object with its class name, id and attributes, and may read,
set or unset fields on it. Returning it from a before-save hook replaces the
pending write.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, Optional, Set

_RESERVED = ("className",)


class CloudObject:
    def __init__(self, class_name: str, object_id: Optional[str] = None, attributes: Optional[Dict[str, Any]] = None):
        self.class_name = class_name
        self.object_id = object_id
        self.attributes: Dict[str, Any] = copy.deepcopy(attributes) if attributes else {}
        self._dirty: Set[str] = set()
        self.status: Optional[int] = None

    def get(self, key: str, default: Any = None) -> Any:
        if key == "objectId":
            return self.object_id
        return self.attributes.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.attributes

    def set(self, key_or_values: Any, value: Any = None) -> "CloudObject":
        if isinstance(key_or_values, dict):
            items: Iterable = key_or_values.items()
        else:
            items = [(key_or_values, value)]
        for key, val in items:
            if key in _RESERVED:
                continue
            if key == "objectId":
                self.object_id = val
                continue
            self.attributes[key] = copy.deepcopy(val)
            self._dirty.add(key)
        return self

    def unset(self, key: str) -> "CloudObject":
        self.attributes.pop(key, None)
        self._dirty.add(key)
        return self

    def dirty_keys(self) -> Set[str]:
        return set(self._dirty)

    def handle_save_response(self, response: Dict[str, Any], status: int = 200) -> None:
        """Fold the server response (ids, timestamps) back into the handle."""
        for key, val in (response or {}).items():
            if key == "objectId":
                self.object_id = val
            else:
                self.attributes[key] = copy.deepcopy(val)
        self._dirty.clear()
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        out = copy.deepcopy(self.attributes)
        if self.object_id:
            out["objectId"] = self.object_id
        return out

    def __repr__(self) -> str:
        return f"CloudObject({self.class_name!r}, {self.object_id!r})"
