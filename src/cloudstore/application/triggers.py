"""
Trigger gateway: user-registered hooks that run before or after a write.

Hooks are keyed by (kind, class name, application id). A hook receives a
TriggerRequest and may be sync or async. A before-save hook that returns a
CloudObject or a mapping replaces the pending write with it.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.domain.auth import Auth
from cloudstore.domain.cloud_object import CloudObject

logger = logging.getLogger(__name__)


class TriggerType(str, Enum):
    before_save = "beforeSave"
    after_save = "afterSave"
    before_delete = "beforeDelete"
    after_delete = "afterDelete"


@dataclass
class TriggerRequest:
    trigger_name: TriggerType
    object: CloudObject
    original: Optional[CloudObject] = None
    master: bool = False
    user: Optional[Dict[str, Any]] = None
    installation_id: Optional[str] = None


Hook = Callable[[TriggerRequest], Any]


class TriggerRegistry:
    def __init__(self) -> None:
        self._hooks: Dict[Tuple[str, str, str], Hook] = {}

    def add(self, kind: TriggerType, class_name: str, handler: Hook, application_id: str) -> None:
        self._hooks[(TriggerType(kind).value, class_name, application_id)] = handler

    def remove(self, kind: TriggerType, class_name: str, application_id: str) -> None:
        self._hooks.pop((TriggerType(kind).value, class_name, application_id), None)

    def clear(self, application_id: Optional[str] = None) -> None:
        if application_id is None:
            self._hooks.clear()
            return
        for key in [k for k in self._hooks if k[2] == application_id]:
            del self._hooks[key]

    def get(self, class_name: str, kind: TriggerType, application_id: Optional[str]) -> Optional[Hook]:
        if not application_id:
            return None
        return self._hooks.get((TriggerType(kind).value, class_name, application_id))

    def trigger_exists(self, class_name: str, kind: TriggerType, application_id: Optional[str]) -> bool:
        return self.get(class_name, kind, application_id) is not None

    async def maybe_run_trigger(
        self,
        kind: TriggerType,
        auth: Auth,
        obj: CloudObject,
        original: Optional[CloudObject],
        application_id: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        """
        Run the hook for `obj.class_name` if one is registered.

        Returns the replacement object as a mapping when a before-save hook
        hands one back, otherwise None.
        """
        hook = self.get(obj.class_name, kind, application_id)
        if hook is None:
            return None

        request = TriggerRequest(
            trigger_name=TriggerType(kind),
            object=obj,
            original=original,
            master=auth.is_master,
            user=auth.user,
            installation_id=auth.installation_id,
        )
        try:
            result = hook(request)
            if inspect.isawaitable(result):
                result = await result
        except CloudStoreError:
            raise
        except Exception as exc:
            logger.warning("%s trigger for %s failed: %s", TriggerType(kind).value, obj.class_name, exc)
            raise CloudStoreError(ErrorCode.SCRIPT_FAILED, str(exc) or "Script failed.") from exc

        if TriggerType(kind) is not TriggerType.before_save:
            return None
        if isinstance(result, CloudObject):
            return result.to_dict()
        if isinstance(result, dict):
            return dict(result)
        return None


def inflate(extra: Dict[str, Any], raw: Optional[Dict[str, Any]]) -> CloudObject:
    """Build a trigger handle from raw REST data plus `className`/`objectId`."""
    data = dict(raw or {})
    data.update({k: v for k, v in extra.items() if k != "className"})
    object_id = data.pop("objectId", None)
    data.pop("className", None)
    return CloudObject(extra["className"], object_id, data)
