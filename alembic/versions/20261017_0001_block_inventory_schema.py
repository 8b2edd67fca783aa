"""block inventory schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "blocks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("size", sa.String(length=64), nullable=False),
        sa.Column("produced", sa.Integer(), nullable=False),
        sa.Column("sold", sa.Integer(), nullable=False),
        sa.Column("in_stock", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_blocks_id"), "blocks", ["id"], unique=False)
    op.create_index(op.f("ix_blocks_size"), "blocks", ["size"], unique=True)

    op.create_table(
        "productions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("block_size", sa.String(length=64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_productions_id"), "productions", ["id"], unique=False)
    op.create_index(op.f("ix_productions_block_size"), "productions", ["block_size"], unique=False)
    op.create_index(op.f("ix_productions_recorded_at"), "productions", ["recorded_at"], unique=False)

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("block_size", sa.String(length=64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("customer", sa.String(length=160), nullable=True),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sales_id"), "sales", ["id"], unique=False)
    op.create_index(op.f("ix_sales_block_size"), "sales", ["block_size"], unique=False)
    op.create_index(op.f("ix_sales_recorded_at"), "sales", ["recorded_at"], unique=False)

    op.create_table(
        "raw_materials",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("unit", sa.String(length=24), nullable=False),
        sa.Column("received", sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column("used", sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column("in_stock", sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_raw_materials_id"), "raw_materials", ["id"], unique=False)
    op.create_index(op.f("ix_raw_materials_name"), "raw_materials", ["name"], unique=True)

    op.create_table(
        "raw_material_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("material_name", sa.String(length=120), nullable=False),
        sa.Column("kind", sa.String(length=8), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column("unit", sa.String(length=24), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_raw_material_logs_id"), "raw_material_logs", ["id"], unique=False)
    op.create_index(op.f("ix_raw_material_logs_material_name"), "raw_material_logs", ["material_name"], unique=False)
    op.create_index(op.f("ix_raw_material_logs_recorded_at"), "raw_material_logs", ["recorded_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_raw_material_logs_recorded_at"), table_name="raw_material_logs")
    op.drop_index(op.f("ix_raw_material_logs_material_name"), table_name="raw_material_logs")
    op.drop_index(op.f("ix_raw_material_logs_id"), table_name="raw_material_logs")
    op.drop_table("raw_material_logs")

    op.drop_index(op.f("ix_raw_materials_name"), table_name="raw_materials")
    op.drop_index(op.f("ix_raw_materials_id"), table_name="raw_materials")
    op.drop_table("raw_materials")

    op.drop_index(op.f("ix_sales_recorded_at"), table_name="sales")
    op.drop_index(op.f("ix_sales_block_size"), table_name="sales")
    op.drop_index(op.f("ix_sales_id"), table_name="sales")
    op.drop_table("sales")

    op.drop_index(op.f("ix_productions_recorded_at"), table_name="productions")
    op.drop_index(op.f("ix_productions_block_size"), table_name="productions")
    op.drop_index(op.f("ix_productions_id"), table_name="productions")
    op.drop_table("productions")

    op.drop_index(op.f("ix_blocks_size"), table_name="blocks")
    op.drop_index(op.f("ix_blocks_id"), table_name="blocks")
    op.drop_table("blocks")
