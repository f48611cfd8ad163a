from cloudstore.infrastructure.stores.document_store import DocumentDatabase
from cloudstore.infrastructure.stores.memory_database import InMemoryDatabase
from cloudstore.infrastructure.stores.object_store import SqlAlchemyDatabase

__all__ = ["DocumentDatabase", "InMemoryDatabase", "SqlAlchemyDatabase"]
