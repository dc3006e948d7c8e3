"""Baseline migration - document table

Revision ID: 001
Revises: 
Create Date: 2026-10-19 09:00:00.000000

Every collection (housekeeping_data, hk_users, otp_codes,
booking_notifications, room_config) lives in one JSONB table keyed by
(collection, id).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the documents table and its indexes."""

    op.execute("""
        CREATE TABLE IF NOT EXISTS documents (
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            data JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (collection, id)
        )
    """)

    # Containment lookups (user email, compare-and-set guards)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_documents_data
        ON documents USING GIN (data jsonb_path_ops)
    """)

    # Notification listing and retention sweeps order/filter by receivedAt
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_documents_received_at
        ON documents (collection, ((data -> 'receivedAt' ->> '$date')))
        WHERE data ? 'receivedAt'
    """)


def downgrade() -> None:
    """Drop the documents table."""
    op.execute("DROP INDEX IF EXISTS idx_documents_received_at")
    op.execute("DROP INDEX IF EXISTS idx_documents_data")
    op.execute("DROP TABLE IF EXISTS documents")
