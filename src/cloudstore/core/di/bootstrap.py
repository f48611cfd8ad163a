"""
容器装配：注册进程级单例，并把应用选项组装成 AppCache 条目。
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from cloudstore.application.auth_providers import AuthDataManager
from cloudstore.application.triggers import TriggerRegistry
from cloudstore.config.cache import AppCache, AppEntry, ConfigResolver
from cloudstore.config.config import Config
from cloudstore.config.models import AppOptions
from cloudstore.core.di.container import Container

logger = logging.getLogger(__name__)


def bootstrap_dependencies(container: Optional[Container] = None) -> Container:
    """注册 AppCache / ConfigResolver / TriggerRegistry（已注册的保持不变）"""
    container = container or Container.instance()
    if not container.is_registered(AppCache):
        container.register(AppCache, AppCache, singleton=True)
    if not container.is_registered(ConfigResolver):
        container.register(ConfigResolver, lambda: ConfigResolver(container.resolve(AppCache)), singleton=True)
    if not container.is_registered(TriggerRegistry):
        container.register(TriggerRegistry, TriggerRegistry, singleton=True)
    return container


def _default_database(options: AppOptions) -> Any:
    from cloudstore.infrastructure.stores import InMemoryDatabase, SqlAlchemyDatabase

    if options.database_url:
        return SqlAlchemyDatabase(options.database_url)
    return InMemoryDatabase()


def register_app(
    options: AppOptions,
    *,
    database: Any = None,
    files_controller: Any = None,
    user_controller: Any = None,
    email_adapter: Any = None,
    auth_data_manager: Optional[AuthDataManager] = None,
    push_controller: Any = None,
    logger_controller: Any = None,
    hooks_controller: Any = None,
    container: Optional[Container] = None,
) -> AppEntry:
    """
    校验选项并登记一个应用；未提供的协作者使用内置实现。

    Raises:
        ConfigurationError: 邮箱验证配置不完整
    """
    from cloudstore.infrastructure.controllers import FilesController, LoggingEmailAdapter, UserController

    Config.validate(options)
    container = bootstrap_dependencies(container)
    cache = container.resolve(AppCache)

    entry = AppEntry(
        options=options,
        database=database if database is not None else _default_database(options),
        hooks_controller=hooks_controller,
        files_controller=files_controller or FilesController(),
        push_controller=push_controller,
        logger_controller=logger_controller,
        auth_data_manager=auth_data_manager or AuthDataManager(),
        triggers=container.resolve(TriggerRegistry),
    )
    cache.put(entry)
    if user_controller is None:
        # 控制器只读取 URL 与开关，用应用自身的 Config 即可
        app_config = container.resolve(ConfigResolver).resolve(options.application_id)
        user_controller = UserController(app_config, email_adapter or LoggingEmailAdapter())
    entry.user_controller = user_controller

    logger.info("registered app %s (database=%s)", options.application_id, type(entry.database).__name__)
    return entry
