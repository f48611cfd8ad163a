"""
Schema inference and validation. A class schema maps field name to a type
string; unknown fields are learned on first write, conflicting types fail.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.domain.encoding import SYSTEM_CLASSES

_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

# maintained by the server, never typed by clients
DEFAULT_FIELDS = ("objectId", "createdAt", "updatedAt", "ACL")
INTERNAL_FIELDS = ("_hashed_password", "_email_verify_token")


def validate_class_name(class_name: str) -> None:
    if class_name in SYSTEM_CLASSES:
        return
    if not isinstance(class_name, str) or not _NAME_RE.match(class_name):
        raise CloudStoreError(ErrorCode.INVALID_CLASS_NAME, f"invalid className: {class_name}")


def validate_field_name(field_name: str) -> None:
    if field_name in INTERNAL_FIELDS:
        return
    if not _NAME_RE.match(field_name):
        raise CloudStoreError(ErrorCode.INVALID_KEY_NAME, f"invalid field name: {field_name}")


def infer_type(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, (int, float)):
        return "Number"
    if isinstance(value, str):
        return "String"
    if isinstance(value, list):
        return "Array"
    if isinstance(value, dict):
        if "__op" in value:
            op = value["__op"]
            if op == "Increment":
                amount = value.get("amount", 1)
                if isinstance(amount, bool) or not isinstance(amount, (int, float)):
                    raise CloudStoreError(ErrorCode.INCORRECT_TYPE, "Increment amount must be a number")
                return "Number"
            if op in ("Add", "AddUnique", "Remove"):
                return "Array"
            return None
        kind = value.get("__type")
        if kind == "Pointer":
            return "*" + str(value.get("className"))
        if kind in ("Date", "File", "GeoPoint", "Bytes"):
            return kind
        return "Object"
    raise CloudStoreError(ErrorCode.INCORRECT_TYPE, f"unsupported value type: {type(value).__name__}")


def validate_against(class_name: str, schema: Dict[str, str], data: Dict[str, Any]) -> Dict[str, str]:
    """Check `data` against `schema`; return the new fields to add to it."""
    validate_class_name(class_name)
    learned: Dict[str, str] = {}
    for key, value in data.items():
        if key in DEFAULT_FIELDS:
            if key == "ACL" and value is not None and not isinstance(value, dict):
                raise CloudStoreError(ErrorCode.INVALID_ACL, "ACL must be an object")
            continue
        validate_field_name(key)
        found = infer_type(value)
        if found is None:
            continue
        expected = schema.get(key) or learned.get(key)
        if expected is None:
            learned[key] = found
        elif expected != found:
            raise CloudStoreError(
                ErrorCode.INCORRECT_TYPE,
                f"schema mismatch for {class_name}.{key}; expected {expected} but got {found}",
            )
    return learned
