"""
依赖注入模块。
"""

from .container import Container, DependencyNotRegistered, inject
from .bootstrap import bootstrap_dependencies, register_app

__all__ = ["Container", "DependencyNotRegistered", "inject", "bootstrap_dependencies", "register_app"]
