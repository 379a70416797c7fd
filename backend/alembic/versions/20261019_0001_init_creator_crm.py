"""init creator crm tables

Revision ID: 20261019_0001_init_creator_crm
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001_init_creator_crm"
down_revision = None
branch_labels = None
depends_on = None


def _id_columns() -> list:
    return [
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
    ]


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "projects",
        *_id_columns(),
        sa.Column("project_name", sa.String(length=255), nullable=False),
        sa.Column("brand_name", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Float(), server_default="0", nullable=False),
        sa.Column("status", sa.String(length=32), server_default="idea", nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        _created_at(),
        sa.CheckConstraint("amount >= 0", name="ck_projects_amount_non_negative"),
    )
    op.create_index("ix_projects_user_id", "projects", ["user_id"])
    op.create_index("ix_projects_user_created", "projects", ["user_id", "created_at"])

    op.create_table(
        "brand_deals",
        *_id_columns(),
        sa.Column("brand_name", sa.String(length=255), nullable=False),
        sa.Column("contact_name", sa.String(length=255), nullable=True),
        sa.Column("contact_email", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=64), nullable=True),
        sa.Column("deliverables", sa.Text(), nullable=True),
        sa.Column("fee", sa.Float(), server_default="0", nullable=False),
        sa.Column("status", sa.String(length=32), server_default="negotiation", nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        _created_at(),
        sa.CheckConstraint("fee >= 0", name="ck_brand_deals_fee_non_negative"),
    )
    op.create_index("ix_brand_deals_user_id", "brand_deals", ["user_id"])
    op.create_index("ix_brand_deals_user_created", "brand_deals", ["user_id", "created_at"])

    op.create_table(
        "invoices",
        *_id_columns(),
        sa.Column("invoice_number", sa.String(length=64), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=True),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column("client_company", sa.String(length=255), nullable=True),
        sa.Column("client_email", sa.String(length=255), nullable=True),
        sa.Column("client_address", sa.Text(), nullable=True),
        sa.Column("client_contact", sa.String(length=255), nullable=True),
        sa.Column("po_number", sa.String(length=64), nullable=True),
        sa.Column("creator_name", sa.String(length=255), nullable=True),
        sa.Column("creator_email", sa.String(length=255), nullable=True),
        sa.Column("creator_phone", sa.String(length=64), nullable=True),
        sa.Column("creator_address", sa.Text(), nullable=True),
        sa.Column("creator_business_name", sa.String(length=255), nullable=True),
        sa.Column("creator_tax_id", sa.String(length=64), nullable=True),
        sa.Column("creator_website", sa.String(length=255), nullable=True),
        sa.Column("creator_instagram", sa.String(length=255), nullable=True),
        sa.Column("creator_youtube", sa.String(length=255), nullable=True),
        sa.Column("show_business_name", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("show_contact_info", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("show_tax_id", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("line_items", sa.JSON(), nullable=True),
        sa.Column("subtotal", sa.Float(), server_default="0", nullable=False),
        sa.Column("discount_rate", sa.Float(), server_default="0", nullable=False),
        sa.Column("discount_amount", sa.Float(), server_default="0", nullable=False),
        sa.Column("tax_rate", sa.Float(), server_default="0", nullable=False),
        sa.Column("tax_amount", sa.Float(), server_default="0", nullable=False),
        sa.Column("total", sa.Float(), server_default="0", nullable=False),
        sa.Column("amount", sa.Float(), server_default="0", nullable=False),
        sa.Column("payment_terms", sa.String(length=32), nullable=True),
        sa.Column("payment_methods", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), server_default="draft", nullable=False),
        sa.Column("sent_date", sa.Date(), nullable=True),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column("source_brand_deal_id", sa.String(length=32), nullable=True),
        _created_at(),
        sa.UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_invoice_number"),
        sa.UniqueConstraint(
            "user_id", "source_brand_deal_id", name="uq_invoices_user_source_brand_deal"
        ),
    )
    op.create_index("ix_invoices_user_id", "invoices", ["user_id"])
    op.create_index("ix_invoices_user_created", "invoices", ["user_id", "created_at"])
    op.create_index("ix_invoices_source_brand_deal_id", "invoices", ["source_brand_deal_id"])

    op.create_table(
        "content_posts",
        *_id_columns(),
        sa.Column("project_id", sa.String(length=32), nullable=True),
        sa.Column("brand_deal_id", sa.String(length=32), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("platform", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=16), server_default="draft", nullable=False),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_content_posts_user_id", "content_posts", ["user_id"])
    op.create_index("ix_content_posts_project_id", "content_posts", ["project_id"])
    op.create_index("ix_content_posts_brand_deal_id", "content_posts", ["brand_deal_id"])
    op.create_index("ix_content_posts_user_created", "content_posts", ["user_id", "created_at"])

    op.create_table(
        "tasks",
        *_id_columns(),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("completed", sa.Boolean(), server_default=sa.false(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_tasks_user_id", "tasks", ["user_id"])
    op.create_index("ix_tasks_user_created", "tasks", ["user_id", "created_at"])

    op.create_table(
        "notifications",
        *_id_columns(),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("related_id", sa.String(length=32), nullable=True),
        sa.Column("related_type", sa.String(length=32), nullable=True),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_user_created", "notifications", ["user_id", "created_at"])

    op.create_table(
        "user_profile",
        *_id_columns(),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("business_name", sa.String(length=255), nullable=True),
        sa.Column("business_address", sa.Text(), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("tax_id", sa.String(length=64), nullable=True),
        sa.Column("instagram", sa.String(length=255), nullable=True),
        sa.Column("youtube", sa.String(length=255), nullable=True),
        sa.Column("currency", sa.String(length=8), server_default="USD", nullable=False),
        _created_at(),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_user_profile_user_id", "user_profile", ["user_id"], unique=True)

    op.create_table(
        "user_settings",
        *_id_columns(),
        sa.Column(
            "notifications_enabled", sa.Boolean(), server_default=sa.true(), nullable=False
        ),
        _created_at(),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_user_settings_user_id", "user_settings", ["user_id"], unique=True)


def downgrade() -> None:
    for table in (
        "user_settings",
        "user_profile",
        "notifications",
        "tasks",
        "content_posts",
        "invoices",
        "brand_deals",
        "projects",
    ):
        op.drop_table(table)
