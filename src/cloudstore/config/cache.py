"""
Process-wide registry of configured applications, and the resolver that turns
an application id into a per-request Config.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cloudstore.config.models import AppOptions
from cloudstore.core.background import BackgroundTasks

logger = logging.getLogger(__name__)


@dataclass
class AppEntry:
    options: AppOptions
    database: Any = None
    hooks_controller: Any = None
    files_controller: Any = None
    push_controller: Any = None
    logger_controller: Any = None
    user_controller: Any = None
    auth_data_manager: Any = None
    triggers: Any = None
    background: BackgroundTasks = field(default_factory=BackgroundTasks)


class AppCache:
    def __init__(self) -> None:
        self._apps: Dict[str, AppEntry] = {}

    def put(self, entry: AppEntry) -> AppEntry:
        app_id = entry.options.application_id
        if app_id in self._apps:
            logger.info("app %s reconfigured", app_id)
        self._apps[app_id] = entry
        return entry

    def get(self, application_id: Optional[str]) -> Optional[AppEntry]:
        if not application_id:
            return None
        return self._apps.get(application_id)

    def remove(self, application_id: str) -> None:
        self._apps.pop(application_id, None)

    def entries(self) -> List[AppEntry]:
        return list(self._apps.values())

    def clear(self) -> None:
        self._apps.clear()

    def __contains__(self, application_id: str) -> bool:
        return application_id in self._apps


class ConfigResolver:
    """Builds a Config for an application id from the cache it was given."""

    def __init__(self, cache: AppCache):
        self.cache = cache

    def resolve(self, application_id: Optional[str], mount: str = "") -> "Config":
        from cloudstore.config.config import Config

        return Config(application_id, mount, entry=self.cache.get(application_id))
