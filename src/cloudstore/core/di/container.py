"""
进程级依赖容器：应用缓存、配置解析器、触发器注册表等共享服务都从这里取。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Type, TypeVar

T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class DependencyNotRegistered(ValueError):
    def __init__(self, interface: Type[Any]):
        super().__init__(f"No factory registered for {interface.__name__}")
        self.interface = interface


@dataclass
class Registration:
    factory: Callable[[], Any]
    singleton: bool = False
    instance: Optional[Any] = field(default=None, repr=False)
    built: bool = False

    def get(self) -> Any:
        if not self.singleton:
            return self.factory()
        if not self.built:
            self.instance = self.factory()
            self.built = True
        return self.instance


def kwarg_name(interface: Type[Any]) -> str:
    """ConfigResolver -> config_resolver"""
    return _CAMEL_BOUNDARY.sub("_", interface.__name__).lower()


class Container:
    _instance: Optional["Container"] = None

    def __init__(self) -> None:
        self._registrations: Dict[Type[Any], Registration] = {}

    @classmethod
    def instance(cls) -> "Container":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    def register(self, interface: Type[T], factory: Callable[[], T], singleton: bool = False) -> None:
        """注册（或替换）工厂；替换时丢弃已缓存的单例。"""
        self._registrations[interface] = Registration(factory, singleton)

    def register_instance(self, interface: Type[T], instance: T) -> None:
        self._registrations[interface] = Registration(lambda: instance, True, instance, True)

    def is_registered(self, interface: Type[Any]) -> bool:
        return interface in self._registrations

    def resolve(self, interface: Type[T]) -> T:
        registration = self._registrations.get(interface)
        if registration is None:
            raise DependencyNotRegistered(interface)
        return registration.get()


def inject(*dependencies: Type[Any]):
    """
    类装饰器：按 snake_case 类名把已注册的依赖作为 kwarg 传给 __init__。
    调用方显式传入的 kwarg 优先；未注册的依赖保持缺省。
    """

    def decorator(cls):
        wrapped_init = cls.__init__

        def __init__(self, *args, **kwargs):
            container = Container.instance()
            for dep in dependencies:
                name = kwarg_name(dep)
                if name in kwargs or not container.is_registered(dep):
                    continue
                kwargs[name] = container.resolve(dep)
            wrapped_init(self, *args, **kwargs)

        cls.__init__ = __init__
        return cls

    return decorator
