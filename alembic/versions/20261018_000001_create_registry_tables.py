"""Create receipt registry tables

Revision ID: 20261018_000001
Revises: None
Create Date: 2026-10-18

Registry state (admin, pause flag, id counter), receipts, the payment
reference dedup index, the holder relation and the event outbox. All five
must be restored together.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261018_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "registry_state",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("admin", sa.String(128), nullable=False),
        sa.Column("paused", sa.Boolean(), nullable=False),
        sa.Column("next_id", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_registry_state"),
    )

    op.create_table(
        "receipts",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("buyer", sa.String(128), nullable=False),
        sa.Column("issuer", sa.String(128), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("payment_reference", sa.String(255), nullable=False),
        sa.Column("order_reference", sa.String(255), nullable=True),
        sa.Column("issued_at", sa.DateTime(), nullable=False),
        sa.Column("metadata_pointer", sa.String(1024), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_receipts"),
    )
    op.create_index("ix_receipts_buyer", "receipts", ["buyer"])
    op.create_index("ix_receipts_issuer", "receipts", ["issuer"])

    op.create_table(
        "payment_references",
        sa.Column("fingerprint", sa.String(64), nullable=False),
        sa.Column("receipt_id", sa.Integer(), nullable=True),
        sa.Column("reserved_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("fingerprint", name="pk_payment_references"),
    )
    op.create_index("ix_payment_references_receipt_id", "payment_references", ["receipt_id"])

    op.create_table(
        "receipt_holders",
        sa.Column("receipt_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("holder", sa.String(128), nullable=True),
        sa.Column(
            "state",
            sa.Enum("NEVER_ISSUED", "HELD", "REVOKED", name="holder_state", create_constraint=True),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("receipt_id", name="pk_receipt_holders"),
    )
    op.create_index("ix_receipt_holders_holder", "receipt_holders", ["holder"])
    op.create_index("ix_receipt_holders_state", "receipt_holders", ["state"])

    op.create_table(
        "registry_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("receipt_id", sa.Integer(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("event_hash", sa.String(64), nullable=False),
        sa.Column("previous_hash", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_registry_events"),
        sa.UniqueConstraint("event_hash", name="uq_registry_events_event_hash"),
    )
    op.create_index("ix_registry_events_event_type", "registry_events", ["event_type"])
    op.create_index("ix_registry_events_receipt_id", "registry_events", ["receipt_id"])


def downgrade() -> None:
    op.drop_index("ix_registry_events_receipt_id", table_name="registry_events")
    op.drop_index("ix_registry_events_event_type", table_name="registry_events")
    op.drop_table("registry_events")
    op.drop_index("ix_receipt_holders_state", table_name="receipt_holders")
    op.drop_index("ix_receipt_holders_holder", table_name="receipt_holders")
    op.drop_table("receipt_holders")
    op.drop_index("ix_payment_references_receipt_id", table_name="payment_references")
    op.drop_table("payment_references")
    op.drop_index("ix_receipts_issuer", table_name="receipts")
    op.drop_index("ix_receipts_buyer", table_name="receipts")
    op.drop_table("receipts")
    op.drop_table("registry_state")
