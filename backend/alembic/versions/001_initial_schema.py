"""Initial schema — tontines, participants, payments.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tontines",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("initiator_id", sa.String(128), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("contribution_kind", sa.String(20), nullable=False),
        sa.Column("contribution_amount", sa.Integer, nullable=False),
        sa.Column("cadence", sa.String(20), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column("collection_day", sa.String(10), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("collection_window_start", sa.Date, nullable=True),
        sa.Column("collection_window_end", sa.Date, nullable=True),
        sa.Column("rotation_order", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("invitation_code", sa.String(6), nullable=False, unique=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_tontines_initiator_id", "tontines", ["initiator_id"])
    op.create_index("ix_tontines_status", "tontines", ["status"])

    op.create_table(
        "participants",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("tontine_id", UUID(as_uuid=True), sa.ForeignKey("tontines.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("display_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="unpaid"),
        sa.Column("last_payment_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rotation_position", sa.Integer, nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("tontine_id", "user_id", name="uq_participants_tontine_user"),
    )
    op.create_index("ix_participants_tontine_id", "participants", ["tontine_id"])
    op.create_index("ix_participants_user_id", "participants", ["user_id"])

    op.create_table(
        "payments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("tontine_id", UUID(as_uuid=True), sa.ForeignKey("tontines.id", ondelete="CASCADE"), nullable=False),
        sa.Column("participant_id", sa.String(128), nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("period", sa.String(50), nullable=False),
        sa.Column("proof_ref", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("validator_id", sa.String(128), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("validated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_payments_tontine_submitted", "payments", ["tontine_id", "submitted_at"])


def downgrade() -> None:
    op.drop_index("ix_payments_tontine_submitted", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_participants_user_id", table_name="participants")
    op.drop_index("ix_participants_tontine_id", table_name="participants")
    op.drop_table("participants")
    op.drop_index("ix_tontines_status", table_name="tontines")
    op.drop_index("ix_tontines_initiator_id", table_name="tontines")
    op.drop_table("tontines")
