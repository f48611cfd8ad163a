"""
Application layer: the write pipeline, triggers and the REST entry points.
"""

from cloudstore.application.auth_providers import AuthDataManager
from cloudstore.application.triggers import TriggerRegistry, TriggerRequest, TriggerType, inflate
from cloudstore.application.write import RestWrite, WriteResult, run_write

__all__ = [
    "AuthDataManager",
    "RestWrite",
    "TriggerRegistry",
    "TriggerRequest",
    "TriggerType",
    "WriteResult",
    "inflate",
    "run_write",
]
