"""link invoices to projects

Revision ID: 20261019_0002_invoice_project_link
Revises: 20261019_0001_init_creator_crm
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0002_invoice_project_link"
down_revision = "20261019_0001_init_creator_crm"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("invoices") as batch:
        batch.add_column(sa.Column("project_id", sa.String(length=32), nullable=True))
        batch.create_index("ix_invoices_project_id", ["project_id"])


def downgrade() -> None:
    with op.batch_alter_table("invoices") as batch:
        batch.drop_index("ix_invoices_project_id")
        batch.drop_column("project_id")
