"""Create profiles, accounts, activity_log and transfers

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from admin_ledger.models.types import Money


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role_enum = sa.Enum(
    "admin", "customer", name="user_role_enum", create_constraint=True
)
user_status_enum = sa.Enum(
    "active", "suspended", name="user_status_enum", create_constraint=True
)
activity_action_enum = sa.Enum(
    "balance_update", "transfer_created", "account_frozen", "account_unfrozen",
    name="activity_action_enum", create_constraint=True,
)
transfer_status_enum = sa.Enum(
    "pending", "completed", "failed", "cancelled",
    name="transfer_status_enum", create_constraint=True,
)


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("display_name", sa.String(200), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("status", user_status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "accounts",
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("balance", Money(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("is_frozen", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("admin_id", sa.String(36), nullable=False),
        sa.Column("action", activity_action_enum, nullable=False),
        sa.Column("target_user_id", sa.String(36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_activity_log_admin_id", "activity_log", ["admin_id"])
    op.create_index(
        "ix_activity_log_target_user_id", "activity_log", ["target_user_id"]
    )
    op.create_index("ix_activity_log_created_at", "activity_log", ["created_at"])

    op.create_table(
        "transfers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("idempotency_key", sa.String(100), nullable=True),
        sa.Column("from_user_id", sa.String(36), nullable=False),
        sa.Column("to_user_id", sa.String(36), nullable=False),
        sa.Column("amount", Money(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("status", transfer_status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
        sa.CheckConstraint(
            "from_user_id <> to_user_id", name="ck_transfers_distinct_parties"
        ),
    )
    op.create_index(
        "ix_transfers_idempotency_key", "transfers", ["idempotency_key"],
        unique=True,
    )
    op.create_index("ix_transfers_from_user_id", "transfers", ["from_user_id"])
    op.create_index("ix_transfers_to_user_id", "transfers", ["to_user_id"])
    op.create_index("ix_transfers_created_at", "transfers", ["created_at"])


def downgrade() -> None:
    op.drop_table("transfers")
    op.drop_table("activity_log")
    op.drop_table("accounts")
    op.drop_table("profiles")

    bind = op.get_bind()
    for enum in (
        transfer_status_enum,
        activity_action_enum,
        user_status_enum,
        user_role_enum,
    ):
        enum.drop(bind, checkfirst=True)
