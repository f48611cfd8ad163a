from .database_port import DatabasePort
from .controller_ports import EmailAdapterPort, FilesControllerPort, UserControllerPort

__all__ = ["DatabasePort", "EmailAdapterPort", "FilesControllerPort", "UserControllerPort"]
