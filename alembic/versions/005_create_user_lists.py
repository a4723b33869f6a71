"""005: create user list tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE cart_items (
            user_id     VARCHAR(64)     NOT NULL,
            product_id  VARCHAR(20)     NOT NULL
                        REFERENCES products (id) ON DELETE CASCADE,
            added_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, product_id)
        );
    """)
    # No FK on product_id: purchase history outlives the product
    op.execute("""
        CREATE TABLE history_orders (
            id                  VARCHAR(20)     PRIMARY KEY,
            user_id             VARCHAR(64)     NOT NULL,
            product_id          VARCHAR(20)     NOT NULL,
            price_at_purchase   BIGINT          NOT NULL,
            purchased_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_history_price CHECK (price_at_purchase >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_history_user ON history_orders (user_id, purchased_at);")
    op.execute("""
        CREATE TABLE sell_items (
            user_id         VARCHAR(64)     NOT NULL,
            product_id      VARCHAR(20)     NOT NULL
                            REFERENCES products (id) ON DELETE CASCADE,
            asking_price    BIGINT,
            listed_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, product_id),
            CONSTRAINT ck_sell_asking_price CHECK (asking_price IS NULL OR asking_price >= 0)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS sell_items CASCADE;")
    op.execute("DROP TABLE IF EXISTS history_orders CASCADE;")
    op.execute("DROP TABLE IF EXISTS cart_items CASCADE;")
