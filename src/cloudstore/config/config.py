"""
A Config describes how one application is set up: its keys, URLs, feature
flags and the handles (database, controllers) the write path calls into.
`mount` is the public URL root of the API, e.g. `https://api.example.com/1`.
"""

from __future__ import annotations

from typing import Any, Optional

from cloudstore.config.cache import AppEntry
from cloudstore.config.models import AppOptions, CustomPages
from cloudstore.core.background import BackgroundTasks
from cloudstore.core.errors import ConfigurationError


class Config:
    def __init__(self, application_id: Optional[str], mount: str = "", entry: Optional[AppEntry] = None):
        self.mount = (mount or "").rstrip("/")
        self.application_id: Optional[str] = None
        self.master_key: Optional[str] = None
        self.client_key: Optional[str] = None
        self.javascript_key: Optional[str] = None
        self.dotnet_key: Optional[str] = None
        self.rest_api_key: Optional[str] = None
        self.file_key: Optional[str] = None
        self.facebook_app_ids: list = []
        self.collection_prefix = ""
        self.allow_client_class_creation = True
        self.server_url: Optional[str] = None
        self.public_server_url: Optional[str] = None
        self.verify_user_emails = False
        self.app_name: Optional[str] = None
        self.custom_pages = CustomPages()
        self.database: Any = None
        self.hooks_controller: Any = None
        self.files_controller: Any = None
        self.push_controller: Any = None
        self.logger_controller: Any = None
        self.user_controller: Any = None
        self.auth_data_manager: Any = None
        self.triggers: Any = None
        self.background = BackgroundTasks()
        if entry is None:
            # unknown application: an empty, invalid config rather than an error
            return

        options = entry.options
        self.application_id = application_id
        self.master_key = options.master_key
        self.client_key = options.client_key
        self.javascript_key = options.javascript_key
        self.dotnet_key = options.dotnet_key
        self.rest_api_key = options.rest_api_key
        self.file_key = options.file_key
        self.facebook_app_ids = list(options.facebook_app_ids)
        self.allow_client_class_creation = options.allow_client_class_creation
        self.collection_prefix = options.collection_prefix

        self.server_url = options.server_url
        self.public_server_url = options.public_server_url
        self.verify_user_emails = options.verify_user_emails
        self.app_name = options.app_name
        self.custom_pages = options.custom_pages

        self.database = entry.database
        self.hooks_controller = entry.hooks_controller
        self.files_controller = entry.files_controller
        self.push_controller = entry.push_controller
        self.logger_controller = entry.logger_controller
        self.user_controller = entry.user_controller
        self.auth_data_manager = entry.auth_data_manager
        self.triggers = entry.triggers
        self.background = entry.background

    @property
    def is_valid(self) -> bool:
        return self.application_id is not None

    @property
    def invalid_link_url(self) -> str:
        return self.custom_pages.invalid_link or f"{self.public_server_url}/apps/invalid_link.html"

    @property
    def verify_email_success_url(self) -> str:
        return self.custom_pages.verify_email_success or f"{self.public_server_url}/apps/verify_email_success.html"

    @property
    def choose_password_url(self) -> str:
        return self.custom_pages.choose_password or f"{self.public_server_url}/apps/choose_password"

    @property
    def request_reset_password_url(self) -> str:
        return f"{self.public_server_url}/apps/{self.application_id}/request_password_reset"

    @property
    def password_reset_success_url(self) -> str:
        return self.custom_pages.password_reset_success or f"{self.public_server_url}/apps/password_reset_success.html"

    @property
    def verify_email_url(self) -> str:
        return f"{self.public_server_url}/apps/{self.application_id}/verify_email"

    @classmethod
    def validate(cls, options: AppOptions) -> None:
        cls.validate_email_configuration(
            verify_user_emails=options.verify_user_emails,
            app_name=options.app_name,
            public_server_url=options.public_server_url,
        )

    @staticmethod
    def validate_email_configuration(
        *, verify_user_emails: bool, app_name: Optional[str], public_server_url: Optional[str]
    ) -> None:
        if verify_user_emails:
            if not isinstance(app_name, str):
                raise ConfigurationError("An app name is required when using email verification.")
            if not isinstance(public_server_url, str):
                raise ConfigurationError("A public server url is required when using email verification.")
