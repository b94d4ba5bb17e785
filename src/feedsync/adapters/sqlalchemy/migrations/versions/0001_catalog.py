"""Catalog, operation log and run lock tables.

Revision ID: 0001_catalog
Revises:
Create Date: 2026-09-14 10:12:00
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic import op

if TYPE_CHECKING:
    from collections.abc import Sequence

revision: str = "0001_catalog"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "catalog_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sku", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.String(length=32), nullable=False),
        sa.Column("stock_status", sa.String(length=16), nullable=False),
        sa.Column("manage_stock", sa.Boolean(), nullable=False),
        sa.Column("visibility", sa.String(length=16), nullable=False),
        sa.Column("brand", sa.String(length=255), nullable=True),
        sa.Column("image_id", sa.String(length=128), nullable=True),
        sa.Column("gallery_image_ids", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_catalog_entry")),
        sa.UniqueConstraint("sku", name=op.f("uq_catalog_entry_sku")),
    )
    op.create_table(
        "catalog_entry_meta",
        sa.Column("entry_id", sa.Uuid(), nullable=False),
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(
            ["entry_id"],
            ["catalog_entry.id"],
            name=op.f("fk_catalog_entry_meta_entry_id_catalog_entry"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("entry_id", "key", name=op.f("pk_catalog_entry_meta")),
    )
    op.create_index(
        "ix_catalog_entry_meta_key_value",
        "catalog_entry_meta",
        ["key", "value"],
    )
    op.create_table(
        "catalog_entry_tag",
        sa.Column("entry_id", sa.Uuid(), nullable=False),
        sa.Column("taxonomy", sa.String(length=64), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(
            ["entry_id"],
            ["catalog_entry.id"],
            name=op.f("fk_catalog_entry_tag_entry_id_catalog_entry"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("entry_id", "taxonomy", "value", name=op.f("pk_catalog_entry_tag")),
    )
    op.create_table(
        "operation_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("line", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_operation_log")),
    )
    op.create_table(
        "sync_run_lock",
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("holder", sa.String(length=128), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("name", name=op.f("pk_sync_run_lock")),
    )


def downgrade() -> None:
    op.drop_table("sync_run_lock")
    op.drop_table("operation_log")
    op.drop_table("catalog_entry_tag")
    op.drop_index("ix_catalog_entry_meta_key_value", table_name="catalog_entry_meta")
    op.drop_table("catalog_entry_meta")
    op.drop_table("catalog_entry")
