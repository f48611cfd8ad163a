"""objects and schemas tables

Revision ID: 0001_objects_and_schemas
Revises: None
Create Date: 2026-10-19

Creates the document store tables used by SqlAlchemyDatabase. Online upgrades
skip tables that already exist (local databases may have been bootstrapped with
`Base.metadata.create_all()`).
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import context, op

revision = "0001_objects_and_schemas"
down_revision = None
branch_labels = None
depends_on = None


def _has_table(name: str) -> bool:
    if context.is_offline_mode():
        return False
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade() -> None:
    if not _has_table("objects"):
        op.create_table(
            "objects",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("class_name", sa.String(length=128), nullable=False),
            sa.Column("object_id", sa.String(length=64), nullable=False),
            sa.Column("data_json", sa.Text(), nullable=False, server_default="{}"),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("class_name", "object_id", name="uq_objects_class_object"),
        )
        op.create_index("ix_objects_class_name", "objects", ["class_name"])
        op.create_index("ix_objects_object_id", "objects", ["object_id"])

    if not _has_table("schemas"):
        op.create_table(
            "schemas",
            sa.Column("class_name", sa.String(length=128), primary_key=True),
            sa.Column("fields_json", sa.Text(), nullable=False, server_default="{}"),
        )


def downgrade() -> None:
    op.drop_table("schemas")
    op.drop_index("ix_objects_object_id", table_name="objects")
    op.drop_index("ix_objects_class_name", table_name="objects")
    op.drop_table("objects")
