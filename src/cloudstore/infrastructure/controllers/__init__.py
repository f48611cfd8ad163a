from .email_adapter import LoggingEmailAdapter
from .files_controller import FilesController
from .user_controller import UserController

__all__ = ["FilesController", "LoggingEmailAdapter", "UserController"]
