from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.config.config import Config


@runtime_checkable
class FilesControllerPort(Protocol):
    def expand_files_in_object(self, config: "Config", obj: Any) -> None:
        """Fill in `url` for every File reference inside `obj`, in place."""


@runtime_checkable
class UserControllerPort(Protocol):
    def set_email_verify_token(self, user: Dict[str, Any]) -> None:
        """Stamp verification fields on a user payload before it is saved."""

    async def send_verification_email(self, user: Dict[str, Any]) -> None:
        """Deliver the verification email for a saved user."""


@runtime_checkable
class EmailAdapterPort(Protocol):
    async def send_mail(self, to: str, subject: str, text: str) -> None:
        """Deliver one plain-text email."""
