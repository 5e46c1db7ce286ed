"""create fleet_models, products and model_annotations tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "fleet_models",
        sa.Column("model_id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("brand", sa.String(length=120), nullable=False),
        sa.Column("model_name", sa.String(length=255), nullable=False),
        sa.Column("model_variant", sa.String(length=255), nullable=True),
        sa.Column("year_from", sa.Integer(), nullable=True),
        sa.Column("year_to", sa.Integer(), nullable=True),
        sa.Column(
            "priority_category",
            sa.String(length=16),
            nullable=True,
            comment="Ordinal tier label, e.g. AA / A / B / C",
        ),
        sa.Column("fleet_size", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        sa.Column(
            "extra",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="Additional source columns kept verbatim",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("model_id"),
    )
    op.create_index("ix_fleet_models_sort_order", "fleet_models", ["sort_order"], unique=False)
    op.create_index("ix_fleet_models_priority_category", "fleet_models", ["priority_category"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column(
            "model_key",
            sa.String(length=64),
            nullable=True,
            comment="Parsed join key as text; NULL when the source key cannot join fleet_models.model_id",
        ),
        sa.Column("dimension1", sa.String(length=255), nullable=False),
        sa.Column("dimension2", sa.String(length=255), nullable=False),
        sa.Column("supplier_code", sa.String(length=120), nullable=False),
        sa.Column("equivalence_code", sa.String(length=255), nullable=True),
        sa.Column("part_number", sa.String(length=255), nullable=True),
        sa.Column("part_brand", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("extra", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_dimension1", "products", ["dimension1"], unique=False)
    op.create_index("ix_products_model_key", "products", ["model_key"], unique=False)

    op.create_table(
        "model_annotations",
        sa.Column("model_name", sa.String(length=255), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("team", sa.String(length=64), nullable=False),
        sa.Column("noted_on", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("model_name"),
    )


def downgrade() -> None:
    op.drop_table("model_annotations")
    op.drop_index("ix_products_model_key", table_name="products")
    op.drop_index("ix_products_dimension1", table_name="products")
    op.drop_table("products")
    op.drop_index("ix_fleet_models_priority_category", table_name="fleet_models")
    op.drop_index("ix_fleet_models_sort_order", table_name="fleet_models")
    op.drop_table("fleet_models")
