"""
领域层：调用方身份、对象句柄、编码与令牌工具。
"""

from .auth import Auth, master, nobody, get_auth_for_session_token
from .cloud_object import CloudObject

__all__ = ["Auth", "master", "nobody", "get_auth_for_session_token", "CloudObject"]
