"""
Shared implementation of the database contract on top of a handful of
storage primitives. Backends only decide where documents and schemas live.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.infrastructure.stores.query import apply_update, can_read, can_write, matches
from cloudstore.infrastructure.stores.schema import validate_against

logger = logging.getLogger(__name__)


class DocumentDatabase(ABC):
    # primitives that hit a real database run in a worker thread
    blocking_io = False

    # ---- storage primitives ----

    @abstractmethod
    def _all(self, class_name: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def _insert(self, class_name: str, obj: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _replace(self, class_name: str, obj: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _delete(self, class_name: str, object_ids: List[str]) -> None:
        ...

    @abstractmethod
    def _load_schema(self, class_name: str) -> Optional[Dict[str, str]]:
        ...

    @abstractmethod
    def _save_schema(self, class_name: str, fields: Dict[str, str]) -> None:
        ...

    async def _io(self, fn, *args):
        if self.blocking_io:
            return await asyncio.to_thread(fn, *args)
        return fn(*args)

    # ---- database contract ----

    async def collection_exists(self, class_name: str) -> bool:
        if await self._io(self._load_schema, class_name) is not None:
            return True
        return bool(await self._io(self._all, class_name))

    async def validate_object(
        self,
        class_name: str,
        data: Dict[str, Any],
        query: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        schema = await self._io(self._load_schema, class_name)
        learned = validate_against(class_name, schema or {}, data or {})
        if schema is None or learned:
            merged = dict(schema or {})
            merged.update(learned)
            await self._io(self._save_schema, class_name, merged)
            if learned:
                logger.debug("schema %s learned fields %s", class_name, sorted(learned))

    async def find(
        self, class_name: str, query: Dict[str, Any], options: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        options = options or {}
        acl = options.get("acl")
        limit = options.get("limit")
        results: List[Dict[str, Any]] = []
        for obj in await self._io(self._all, class_name):
            if not matches(obj, query) or not can_read(obj, acl):
                continue
            results.append(copy.deepcopy(obj))
            if limit is not None and len(results) >= int(limit):
                break
        return results

    async def create(self, class_name: str, data: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> None:
        object_id = data.get("objectId")
        if not object_id:
            raise CloudStoreError(ErrorCode.INTERNAL_SERVER_ERROR, "create requires an objectId")
        if any(o.get("objectId") == object_id for o in await self._io(self._all, class_name)):
            raise CloudStoreError(ErrorCode.DUPLICATE_VALUE, "A duplicate value for a field with unique values was provided")
        obj: Dict[str, Any] = {}
        apply_update(obj, data)
        await self._io(self._insert, class_name, obj)

    async def update(
        self,
        class_name: str,
        query: Dict[str, Any],
        data: Dict[str, Any],
        options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        acl = (options or {}).get("acl")
        for obj in await self._io(self._all, class_name):
            if matches(obj, query) and can_write(obj, acl):
                target = copy.deepcopy(obj)
                computed = apply_update(target, data)
                await self._io(self._replace, class_name, target)
                return computed
        raise CloudStoreError(ErrorCode.OBJECT_NOT_FOUND, "Object not found.")

    async def destroy(self, class_name: str, query: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> None:
        acl = (options or {}).get("acl")
        ids = [
            o["objectId"]
            for o in await self._io(self._all, class_name)
            if matches(o, query) and can_write(o, acl) and o.get("objectId")
        ]
        if ids:
            await self._io(self._delete, class_name, ids)
            logger.debug("destroyed %d %s objects", len(ids), class_name)
