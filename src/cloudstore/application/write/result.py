from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class WriteResult:
    """Outcome of a write: the response body, HTTP status and Location header."""

    response: Optional[Dict[str, Any]] = None
    status: Optional[int] = None
    location: Optional[str] = None

    @property
    def status_code(self) -> int:
        return self.status or 200

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"response": self.response}
        if self.status is not None:
            out["status"] = self.status
        if self.location is not None:
            out["location"] = self.location
        return out
