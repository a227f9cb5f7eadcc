"""create raffle tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BIGINT = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
# Wei amounts exceed 64 bits; SQLite keeps them as decimal strings.
UINT256 = sa.Numeric(78, 0).with_variant(sa.String(length=78), "sqlite")


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", BIGINT, autoincrement=True, nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("balance", UINT256, nullable=False),
        sa.Column("accepts_payouts", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("balance >= 0", name=op.f("ck_accounts_balance_non_negative")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_accounts")),
    )
    op.create_index(op.f("ix_accounts_address"), "accounts", ["address"], unique=True)
    op.create_index(op.f("ix_accounts_id"), "accounts", ["id"], unique=False)

    op.create_table(
        "raffle_rounds",
        sa.Column("id", BIGINT, autoincrement=True, nullable=False),
        sa.Column("state", sa.String(length=20), nullable=False),
        sa.Column("entrance_fee", UINT256, nullable=False),
        sa.Column("interval_seconds", sa.Integer(), nullable=False),
        sa.Column("pooled_balance", UINT256, nullable=False),
        sa.Column("last_draw_timestamp", BIGINT, nullable=False),
        sa.Column("recent_winner", sa.String(length=255), nullable=True),
        sa.Column("oracle_identity", sa.String(length=255), nullable=False),
        sa.Column("key_hash", sa.String(length=255), nullable=False),
        sa.Column("subscription_id", UINT256, nullable=False),
        sa.Column("callback_gas_limit", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "state IN ('open','calculating')", name=op.f("ck_raffle_rounds_state_enum")
        ),
        sa.CheckConstraint(
            "pooled_balance >= 0", name=op.f("ck_raffle_rounds_pooled_balance_non_negative")
        ),
        sa.CheckConstraint(
            "entrance_fee >= 0", name=op.f("ck_raffle_rounds_entrance_fee_non_negative")
        ),
        sa.CheckConstraint(
            "interval_seconds >= 0", name=op.f("ck_raffle_rounds_interval_non_negative")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_raffle_rounds")),
    )

    op.create_table(
        "raffle_entries",
        sa.Column("id", BIGINT, autoincrement=True, nullable=False),
        sa.Column("round_id", BIGINT, nullable=False),
        sa.Column("slot", sa.Integer(), nullable=False),
        sa.Column("participant", sa.String(length=255), nullable=False),
        sa.Column("amount", UINT256, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["round_id"],
            ["raffle_rounds.id"],
            name=op.f("fk_raffle_entries_round_id_raffle_rounds"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_raffle_entries")),
        sa.UniqueConstraint("round_id", "slot", name="uq_raffle_entry_slot"),
    )
    op.create_index(
        op.f("ix_raffle_entries_round_id"), "raffle_entries", ["round_id"], unique=False
    )

    op.create_table(
        "draw_requests",
        sa.Column("id", BIGINT, autoincrement=True, nullable=False),
        sa.Column("round_id", BIGINT, nullable=False),
        sa.Column("request_id", sa.String(length=255), nullable=False),
        sa.Column("num_words", sa.Integer(), nullable=False),
        sa.Column("request_confirmations", sa.Integer(), nullable=False),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["round_id"],
            ["raffle_rounds.id"],
            name=op.f("fk_draw_requests_round_id_raffle_rounds"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_draw_requests")),
        sa.UniqueConstraint("request_id", name=op.f("uq_draw_requests_request_id")),
        sa.UniqueConstraint("round_id", name=op.f("uq_draw_requests_round_id")),
    )


def downgrade() -> None:
    op.drop_table("draw_requests")
    op.drop_index(op.f("ix_raffle_entries_round_id"), table_name="raffle_entries")
    op.drop_table("raffle_entries")
    op.drop_table("raffle_rounds")
    op.drop_index(op.f("ix_accounts_id"), table_name="accounts")
    op.drop_index(op.f("ix_accounts_address"), table_name="accounts")
    op.drop_table("accounts")
