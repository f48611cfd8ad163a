from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ObjectModel(Base):
    """One stored object; the document itself lives in `data_json`."""

    __tablename__ = "objects"
    __table_args__ = (UniqueConstraint("class_name", "object_id", name="uq_objects_class_object"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_name: Mapped[str] = mapped_column(String(128), index=True)
    object_id: Mapped[str] = mapped_column(String(64), index=True)
    data_json: Mapped[str] = mapped_column(Text, default="{}")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def set_data(self, data: Dict[str, Any]) -> None:
        self.data_json = json.dumps(data or {}, ensure_ascii=False)

    def get_data(self) -> Dict[str, Any]:
        return json.loads(self.data_json or "{}")


class SchemaModel(Base):
    __tablename__ = "schemas"

    class_name: Mapped[str] = mapped_column(String(128), primary_key=True)
    fields_json: Mapped[str] = mapped_column(Text, default="{}")

    def set_fields(self, fields: Dict[str, str]) -> None:
        self.fields_json = json.dumps(fields or {}, ensure_ascii=False, sort_keys=True)

    def get_fields(self) -> Dict[str, str]:
        return json.loads(self.fields_json or "{}")
