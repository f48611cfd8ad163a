"""
Query matching and update application for the document stores.

Supports the subset the write path issues: equality (with array
containment), dotted paths, `$ne`, `$in`, `$nin`, `$exists` and `$or`.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Optional

from cloudstore.core.errors import CloudStoreError, ErrorCode

_MISSING = object()


def _resolve(obj: Dict[str, Any], path: str) -> Any:
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _equals(stored: Any, expected: Any) -> bool:
    if stored is _MISSING:
        return expected is None
    if isinstance(stored, list) and not isinstance(expected, list):
        return expected in stored
    return stored == expected


def _match_operator(stored: Any, op: str, arg: Any) -> bool:
    if op == "$ne":
        return not _equals(stored, arg)
    if op == "$in":
        values = list(arg or [])
        if isinstance(stored, list):
            return any(v in values for v in stored)
        return stored is not _MISSING and stored in values
    if op == "$nin":
        values = list(arg or [])
        if isinstance(stored, list):
            return not any(v in values for v in stored)
        return stored is _MISSING or stored not in values
    if op == "$exists":
        return (stored is not _MISSING and stored is not None) == bool(arg)
    raise CloudStoreError(ErrorCode.INVALID_KEY_NAME, f"unsupported query operator: {op}")


def _is_operator_clause(cond: Any) -> bool:
    return isinstance(cond, dict) and bool(cond) and all(k.startswith("$") for k in cond)


def matches(obj: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
    for key, cond in (query or {}).items():
        if key == "$or":
            if not any(matches(obj, sub) for sub in cond or []):
                return False
            continue
        stored = _resolve(obj, key)
        if _is_operator_clause(cond):
            if not all(_match_operator(stored, op, arg) for op, arg in cond.items()):
                return False
        elif not _equals(stored, cond):
            return False
    return True


def _permits(obj: Dict[str, Any], acl: Optional[Iterable[str]], permission: str) -> bool:
    if acl is None:
        return True
    object_acl = obj.get("ACL")
    if not isinstance(object_acl, dict):
        return True
    return any(isinstance(object_acl.get(entry), dict) and object_acl[entry].get(permission) for entry in acl)


def can_read(obj: Dict[str, Any], acl: Optional[Iterable[str]]) -> bool:
    return _permits(obj, acl, "read")


def can_write(obj: Dict[str, Any], acl: Optional[Iterable[str]]) -> bool:
    return _permits(obj, acl, "write")


def apply_update(obj: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply `data` to `obj` in place. Returns the fields whose final value the
    server computed (increments, array ops) so callers can echo them back.
    """
    computed: Dict[str, Any] = {}
    for key, value in data.items():
        if not (isinstance(value, dict) and "__op" in value):
            obj[key] = copy.deepcopy(value)
            continue

        op = value["__op"]
        if op == "Delete":
            obj.pop(key, None)
        elif op == "Increment":
            amount = value.get("amount", 1)
            current = obj.get(key) or 0
            if isinstance(current, bool) or not isinstance(current, (int, float)):
                raise CloudStoreError(ErrorCode.INCORRECT_TYPE, f"cannot increment non-number field {key}")
            obj[key] = current + amount
            computed[key] = obj[key]
        elif op in ("Add", "AddUnique", "Remove"):
            items: List[Any] = list(obj.get(key) or [])
            for item in value.get("objects") or []:
                if op == "Add":
                    items.append(copy.deepcopy(item))
                elif op == "AddUnique" and item not in items:
                    items.append(copy.deepcopy(item))
                elif op == "Remove":
                    items = [i for i in items if i != item]
            obj[key] = items
            computed[key] = copy.deepcopy(items)
        else:
            raise CloudStoreError(ErrorCode.INVALID_KEY_NAME, f"unknown update operator: {op}")
    return computed
