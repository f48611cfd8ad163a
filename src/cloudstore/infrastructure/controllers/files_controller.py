from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import quote

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.config.config import Config

logger = logging.getLogger(__name__)


class FilesController:
    """Resolves `{"__type": "File", "name": ...}` references to public URLs."""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url.rstrip("/") if base_url else None

    def file_url(self, config: "Config", name: str) -> str:
        root = self.base_url or f"{config.mount}/files/{config.application_id}"
        return f"{root}/{quote(name)}"

    def expand_files_in_object(self, config: "Config", obj: Any) -> None:
        if isinstance(obj, list):
            for item in obj:
                self.expand_files_in_object(config, item)
            return
        if not isinstance(obj, dict):
            return
        for value in obj.values():
            if isinstance(value, dict) and value.get("__type") == "File":
                name = value.get("name")
                if name and not value.get("url"):
                    value["url"] = self.file_url(config, name)
            else:
                self.expand_files_in_object(config, value)
