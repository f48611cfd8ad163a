from cloudstore.application.write.result import WriteResult
from cloudstore.application.write.rest_write import RestWrite, run_write

__all__ = ["RestWrite", "WriteResult", "run_write"]
