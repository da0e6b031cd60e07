"""user_contacts

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Address-book entries uploaded for contact matching, kept as keyed digests.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_contacts",
        sa.Column("contact_id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("phone_digest", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("owner_id", "phone_digest", name="uq_contact_owner_digest"),
    )
    op.create_index("ix_user_contacts_phone_digest", "user_contacts", ["phone_digest"])


def downgrade() -> None:
    op.drop_index("ix_user_contacts_phone_digest", table_name="user_contacts")
    op.drop_table("user_contacts")
