from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from cloudstore.infrastructure.stores.document_store import DocumentDatabase
from cloudstore.infrastructure.stores.models import Base, ObjectModel, SchemaModel
from cloudstore.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url

logger = logging.getLogger(__name__)


class SqlAlchemyDatabase(DocumentDatabase):
    """
    SQL-backed document store.

    Notes:
    - Each object is one row keyed by (class_name, object_id); the body is JSON.
    - Matching runs in Python over the class's rows, so this suits small apps
      and tests rather than large collections.
    """

    blocking_io = True

    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    def _all(self, class_name: str) -> List[Dict[str, Any]]:
        with self._provider.session() as session:
            rows = session.execute(
                select(ObjectModel).where(ObjectModel.class_name == class_name).order_by(ObjectModel.id)
            ).scalars()
            return [row.get_data() for row in rows]

    def _insert(self, class_name: str, obj: Dict[str, Any]) -> None:
        with self._provider.session() as session:
            row = ObjectModel(
                class_name=class_name,
                object_id=obj["objectId"],
                updated_at=datetime.now(timezone.utc),
            )
            row.set_data(obj)
            session.add(row)
            session.commit()

    def _replace(self, class_name: str, obj: Dict[str, Any]) -> None:
        with self._provider.session() as session:
            row = session.execute(
                select(ObjectModel).where(
                    ObjectModel.class_name == class_name,
                    ObjectModel.object_id == obj["objectId"],
                )
            ).scalar_one()
            row.set_data(obj)
            row.updated_at = datetime.now(timezone.utc)
            session.commit()

    def _delete(self, class_name: str, object_ids: List[str]) -> None:
        with self._provider.session() as session:
            session.execute(
                delete(ObjectModel).where(
                    ObjectModel.class_name == class_name,
                    ObjectModel.object_id.in_(object_ids),
                )
            )
            session.commit()

    def _load_schema(self, class_name: str) -> Optional[Dict[str, str]]:
        with self._provider.session() as session:
            row = session.get(SchemaModel, class_name)
            return row.get_fields() if row is not None else None

    def _save_schema(self, class_name: str, fields: Dict[str, str]) -> None:
        with self._provider.session() as session:
            row = session.get(SchemaModel, class_name)
            if row is None:
                row = SchemaModel(class_name=class_name)
                session.add(row)
            row.set_fields(fields)
            session.commit()

    def close(self) -> None:
        try:
            self._provider.dispose()
        except Exception:
            logger.debug("engine dispose failed", exc_info=True)
