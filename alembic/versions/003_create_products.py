"""003: create products and product_images tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Money columns are int cents; owner is the users.id UUID as text
    op.execute("""
        CREATE TABLE products (
            id                          VARCHAR(20)     PRIMARY KEY,
            name                        VARCHAR(200)    NOT NULL,
            description                 TEXT            NOT NULL,
            owner                       VARCHAR(64)     NOT NULL,
            price                       BIGINT          NOT NULL,
            demand_value                BIGINT          NOT NULL DEFAULT 0,
            dao_id                      VARCHAR(128),
            on_market                   BOOLEAN         NOT NULL DEFAULT FALSE,
            personal_item               BOOLEAN         NOT NULL DEFAULT FALSE,
            years_of_use                INTEGER,
            authenticity_certificate    TEXT,
            is_market_item              BOOLEAN         NOT NULL DEFAULT FALSE,
            initial_bid                 BIGINT,
            demand_price                BIGINT,
            is_rentable                 BOOLEAN         NOT NULL DEFAULT FALSE,
            image_kind                  VARCHAR(10),
            image_url                   TEXT,
            image_content_type          VARCHAR(100),
            image_filename              VARCHAR(255),
            image_size                  INTEGER,
            version                     BIGINT          NOT NULL DEFAULT 0,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_products_price        CHECK (price > 0),
            CONSTRAINT ck_products_demand_value CHECK (demand_value >= 0),
            CONSTRAINT ck_products_initial_bid  CHECK (initial_bid IS NULL OR initial_bid > 0),
            CONSTRAINT ck_products_demand_price CHECK (demand_price IS NULL OR demand_price >= 0),
            CONSTRAINT ck_products_image_kind   CHECK (
                image_kind IS NULL OR image_kind IN ('stored', 'external')
            ),
            CONSTRAINT ck_products_external_url CHECK (
                image_kind IS DISTINCT FROM 'external' OR image_url IS NOT NULL
            )
        );
    """)
    op.execute("CREATE INDEX idx_products_owner ON products (owner);")
    op.execute("""
        CREATE TRIGGER trg_products_updated_at
            BEFORE UPDATE ON products
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE product_images (
            product_id  VARCHAR(20)     PRIMARY KEY
                        REFERENCES products (id) ON DELETE CASCADE,
            data        BYTEA           NOT NULL
        );
    """)
    op.execute("COMMENT ON TABLE products IS 'Listed products; demand_value is derived from price, initial_bid and live bids';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS product_images CASCADE;")
    op.execute("DROP TABLE IF EXISTS products CASCADE;")
