"""004: create bids table

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bids (
            id          VARCHAR(20)     PRIMARY KEY,
            product_id  VARCHAR(20)     NOT NULL
                        REFERENCES products (id) ON DELETE CASCADE,
            user_id     VARCHAR(64),
            amount      BIGINT          NOT NULL,
            status      VARCHAR(10)     NOT NULL DEFAULT 'pending',
            message     VARCHAR(500),
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bids_amount CHECK (amount > 0),
            CONSTRAINT ck_bids_status CHECK (status IN ('pending', 'accepted', 'rejected'))
        );
    """)
    op.execute("CREATE INDEX idx_bids_product_created ON bids (product_id, created_at);")
    op.execute("CREATE INDEX idx_bids_user ON bids (user_id) WHERE user_id IS NOT NULL;")
    # At most one accepted bid per product
    op.execute("""
        CREATE UNIQUE INDEX uq_bids_one_accepted
            ON bids (product_id) WHERE status = 'accepted';
    """)
    op.execute("""
        CREATE TRIGGER trg_bids_updated_at
            BEFORE UPDATE ON bids
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
