"""create compliance tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_organizations_name"),
    )
    op.create_index("ix_organizations_is_active", "organizations", ["is_active"], unique=False)

    op.create_table(
        "blocks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_blocks_organization_id", "blocks", ["organization_id"], unique=False)

    op.create_table(
        "properties",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("block_id", sa.Uuid(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["block_id"], ["blocks.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_properties_organization_id", "properties", ["organization_id"], unique=False)
    op.create_index("ix_properties_block_id", "properties", ["block_id"], unique=False)

    op.create_table(
        "inspection_templates",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scope", sa.String(length=16), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("scope IN ('property', 'block')", name="ck_inspection_templates_scope"),
    )
    op.create_index(
        "ix_inspection_templates_organization_id",
        "inspection_templates",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        "ix_inspection_templates_scope_active",
        "inspection_templates",
        ["scope", "is_active"],
        unique=False,
    )

    op.create_table(
        "inspections",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("template_id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=True),
        sa.Column("block_id", sa.Uuid(), nullable=True),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["template_id"], ["inspection_templates.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["block_id"], ["blocks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(property_id IS NULL) <> (block_id IS NULL)",
            name="ck_inspections_single_target",
        ),
    )
    op.create_index("ix_inspections_template_id", "inspections", ["template_id"], unique=False)
    op.create_index(
        "ix_inspections_property_scheduled",
        "inspections",
        ["property_id", "scheduled_date"],
        unique=False,
    )
    op.create_index(
        "ix_inspections_block_scheduled",
        "inspections",
        ["block_id", "scheduled_date"],
        unique=False,
    )
    op.create_index("ix_inspections_status", "inspections", ["status"], unique=False)

    op.create_table(
        "compliance_documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=True),
        sa.Column("block_id", sa.Uuid(), nullable=True),
        sa.Column("document_type", sa.String(length=255), nullable=False),
        sa.Column("document_url", sa.Text(), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["block_id"], ["blocks.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_compliance_documents_organization_id",
        "compliance_documents",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        "ix_compliance_documents_property_type",
        "compliance_documents",
        ["property_id", "document_type"],
        unique=False,
    )
    op.create_index(
        "ix_compliance_documents_block_type",
        "compliance_documents",
        ["block_id", "document_type"],
        unique=False,
    )
    op.create_index(
        "ix_compliance_documents_expiry_date",
        "compliance_documents",
        ["expiry_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_compliance_documents_expiry_date", table_name="compliance_documents")
    op.drop_index("ix_compliance_documents_block_type", table_name="compliance_documents")
    op.drop_index("ix_compliance_documents_property_type", table_name="compliance_documents")
    op.drop_index("ix_compliance_documents_organization_id", table_name="compliance_documents")
    op.drop_table("compliance_documents")

    op.drop_index("ix_inspections_status", table_name="inspections")
    op.drop_index("ix_inspections_block_scheduled", table_name="inspections")
    op.drop_index("ix_inspections_property_scheduled", table_name="inspections")
    op.drop_index("ix_inspections_template_id", table_name="inspections")
    op.drop_table("inspections")

    op.drop_index("ix_inspection_templates_scope_active", table_name="inspection_templates")
    op.drop_index("ix_inspection_templates_organization_id", table_name="inspection_templates")
    op.drop_table("inspection_templates")

    op.drop_index("ix_properties_block_id", table_name="properties")
    op.drop_index("ix_properties_organization_id", table_name="properties")
    op.drop_table("properties")

    op.drop_index("ix_blocks_organization_id", table_name="blocks")
    op.drop_table("blocks")

    op.drop_index("ix_organizations_is_active", table_name="organizations")
    op.drop_table("organizations")
