"""Create escrow, milestone, registry and transfer tables.

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f1a9c2e7b10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    milestone_status_enum = sa.Enum("PENDING", "COMPLETED", "PAID", name="milestonestatus")
    transfer_status_enum = sa.Enum("PENDING", "SENT", name="transferstatus")

    op.create_table(
        "escrows",
        *_timestamps(),
        sa.Column("owner", sa.String(length=128), nullable=False),
        sa.Column("developer", sa.String(length=128), nullable=False),
        sa.Column("project_name", sa.String(length=200), nullable=False),
        sa.Column("project_description", sa.Text(), nullable=False),
        sa.Column("total_capital", sa.Numeric(18, 2), nullable=False),
        sa.Column("uncommitted_capital", sa.Numeric(18, 2), nullable=False),
        sa.CheckConstraint("total_capital >= 0", name="ck_escrow_total_capital_non_negative"),
        sa.CheckConstraint("uncommitted_capital >= 0", name="ck_escrow_uncommitted_non_negative"),
        sa.CheckConstraint(
            "uncommitted_capital <= total_capital", name="ck_escrow_uncommitted_within_total"
        ),
    )
    op.create_index("ix_escrows_owner", "escrows", ["owner"], unique=False)
    op.create_index("ix_escrows_developer", "escrows", ["developer"], unique=False)

    op.create_table(
        "escrow_deposits",
        *_timestamps(),
        sa.Column("escrow_id", sa.Integer(), sa.ForeignKey("escrows.id"), nullable=False),
        sa.Column("depositor", sa.String(length=128), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_escrow_deposit_non_negative_amount"),
    )
    op.create_index("ix_escrow_deposits_escrow_id", "escrow_deposits", ["escrow_id"], unique=False)

    op.create_table(
        "escrow_events",
        *_timestamps(),
        sa.Column("escrow_id", sa.Integer(), sa.ForeignKey("escrows.id"), nullable=False),
        sa.Column("kind", sa.String(length=50), nullable=False),
        sa.Column("data_json", sa.JSON(), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_escrow_events_escrow_id", "escrow_events", ["escrow_id"], unique=False)

    op.create_table(
        "milestones",
        *_timestamps(),
        sa.Column("escrow_id", sa.Integer(), sa.ForeignKey("escrows.id"), nullable=False),
        sa.Column("idx", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("tentative_date", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("committed_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", milestone_status_enum, nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("escrow_id", "idx", name="uq_milestone_idx"),
        sa.CheckConstraint("amount >= 0", name="ck_milestone_non_negative_amount"),
        sa.CheckConstraint("amount <= committed_amount", name="ck_milestone_amount_within_committed"),
        sa.CheckConstraint("idx >= 0", name="ck_milestone_non_negative_idx"),
        sa.CheckConstraint("tentative_date >= 0", name="ck_milestone_tentative_date_unsigned"),
    )
    op.create_index("ix_milestones_escrow_id", "milestones", ["escrow_id"], unique=False)

    op.create_table(
        "registry_entries",
        *_timestamps(),
        sa.Column("escrow_id", sa.Integer(), sa.ForeignKey("escrows.id"), nullable=False),
        sa.Column("owner", sa.String(length=128), nullable=False),
        sa.UniqueConstraint("escrow_id", name="uq_registry_entries_escrow_id"),
    )

    op.create_table(
        "transfers",
        *_timestamps(),
        sa.Column("escrow_id", sa.Integer(), sa.ForeignKey("escrows.id"), nullable=False),
        sa.Column("milestone_id", sa.Integer(), sa.ForeignKey("milestones.id"), nullable=False),
        sa.Column("recipient", sa.String(length=128), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", transfer_status_enum, nullable=False),
        sa.Column("reference", sa.String(length=128), nullable=True),
        sa.UniqueConstraint("milestone_id", name="uq_transfers_milestone_id"),
        sa.UniqueConstraint("reference", name="uq_transfers_reference"),
        sa.CheckConstraint("amount > 0", name="ck_transfer_positive_amount"),
    )
    op.create_index("ix_transfers_escrow_id", "transfers", ["escrow_id"], unique=False)
    op.create_index("ix_transfers_recipient_status", "transfers", ["recipient", "status"], unique=False)

    op.create_table(
        "audit_logs",
        *_timestamps(),
        sa.Column("actor", sa.String(length=128), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("data_json", sa.JSON(), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("ix_transfers_recipient_status", table_name="transfers")
    op.drop_index("ix_transfers_escrow_id", table_name="transfers")
    op.drop_table("transfers")
    op.drop_table("registry_entries")
    op.drop_index("ix_milestones_escrow_id", table_name="milestones")
    op.drop_table("milestones")
    op.drop_index("ix_escrow_events_escrow_id", table_name="escrow_events")
    op.drop_table("escrow_events")
    op.drop_index("ix_escrow_deposits_escrow_id", table_name="escrow_deposits")
    op.drop_table("escrow_deposits")
    op.drop_index("ix_escrows_developer", table_name="escrows")
    op.drop_index("ix_escrows_owner", table_name="escrows")
    op.drop_table("escrows")
