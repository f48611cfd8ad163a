"""
Pydantic 配置模型：每个应用注册时提供的选项，支持 YAML 加载。
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


class CustomPages(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    invalid_link: Optional[str] = Field(default=None, alias="invalidLink")
    verify_email_success: Optional[str] = Field(default=None, alias="verifyEmailSuccess")
    choose_password: Optional[str] = Field(default=None, alias="choosePassword")
    password_reset_success: Optional[str] = Field(default=None, alias="passwordResetSuccess")


class AppOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    application_id: str
    master_key: str
    client_key: Optional[str] = None
    javascript_key: Optional[str] = None
    dotnet_key: Optional[str] = None
    rest_api_key: Optional[str] = None
    file_key: Optional[str] = None
    facebook_app_ids: List[str] = Field(default_factory=list)
    allow_client_class_creation: bool = True
    collection_prefix: str = ""
    database_url: Optional[str] = None

    server_url: Optional[str] = None
    public_server_url: Optional[str] = None
    verify_user_emails: bool = False
    app_name: Optional[str] = None
    custom_pages: CustomPages = Field(default_factory=CustomPages)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppOptions":
        file_path = Path(path).expanduser()
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {file_path}")
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        # allow either a bare mapping or one nested under `app:`
        if isinstance(data, dict) and isinstance(data.get("app"), dict):
            data = data["app"]
        return cls(**data)
