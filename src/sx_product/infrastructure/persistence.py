"""ProductRepository — concrete implementation of ProductRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Transaction ownership: the CALLER (application service) commits or rolls back.
get_product(for_update=True) takes a row lock that serializes every writer of
that product until the caller's transaction ends.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_product.domain.models import Bid, ExternalImage, ImageRef, Product, StoredImage

# ---------------------------------------------------------------------------
# SQL: products
# ---------------------------------------------------------------------------

_PRODUCT_COLUMNS = """
    id, name, description, owner, price, demand_value, dao_id,
    on_market, personal_item, years_of_use, authenticity_certificate,
    is_market_item, initial_bid, demand_price, is_rentable,
    image_kind, image_url, image_content_type, image_filename, image_size,
    version, created_at, updated_at
"""

_GET_PRODUCT_SQL = text(f"""
    SELECT {_PRODUCT_COLUMNS}
    FROM products
    WHERE id = :product_id
""")

_GET_PRODUCT_FOR_UPDATE_SQL = text(f"""
    SELECT {_PRODUCT_COLUMNS}
    FROM products
    WHERE id = :product_id
    FOR UPDATE
""")

_LIST_PRODUCTS_SQL = text(f"""
    SELECT {_PRODUCT_COLUMNS}
    FROM products
    WHERE
        (CAST(:owner AS TEXT) IS NULL OR owner = CAST(:owner AS TEXT))
        AND (
            CAST(:cursor_id AS TEXT) IS NULL
            OR CAST(id AS BIGINT) < CAST(CAST(:cursor_id AS TEXT) AS BIGINT)
        )
    ORDER BY CAST(id AS BIGINT) DESC
    LIMIT :limit
""")

_INSERT_PRODUCT_SQL = text("""
    INSERT INTO products (
        id, name, description, owner, price, demand_value, dao_id,
        on_market, personal_item, years_of_use, authenticity_certificate,
        is_market_item, initial_bid, demand_price, is_rentable,
        image_kind, image_url, image_content_type, image_filename, image_size,
        version, created_at, updated_at
    ) VALUES (
        :id, :name, :description, :owner, :price, :demand_value, :dao_id,
        :on_market, :personal_item, :years_of_use, :authenticity_certificate,
        :is_market_item, :initial_bid, :demand_price, :is_rentable,
        :image_kind, :image_url, :image_content_type, :image_filename, :image_size,
        0, :created_at, :updated_at
    )
""")

_UPDATE_PRODUCT_SQL = text("""
    UPDATE products
    SET name = :name,
        description = :description,
        price = :price,
        demand_value = :demand_value,
        dao_id = :dao_id,
        on_market = :on_market,
        personal_item = :personal_item,
        years_of_use = :years_of_use,
        authenticity_certificate = :authenticity_certificate,
        is_market_item = :is_market_item,
        initial_bid = :initial_bid,
        demand_price = :demand_price,
        is_rentable = :is_rentable,
        image_kind = :image_kind,
        image_url = :image_url,
        image_content_type = :image_content_type,
        image_filename = :image_filename,
        image_size = :image_size,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :id
    RETURNING version, updated_at
""")

_DELETE_PRODUCT_SQL = text("""
    DELETE FROM products WHERE id = :product_id
""")

_UPSERT_IMAGE_SQL = text("""
    INSERT INTO product_images (product_id, data)
    VALUES (:product_id, :data)
    ON CONFLICT (product_id) DO UPDATE SET data = EXCLUDED.data
""")

_DELETE_IMAGE_SQL = text("""
    DELETE FROM product_images WHERE product_id = :product_id
""")

_GET_IMAGE_SQL = text("""
    SELECT p.image_kind, p.image_url, p.image_content_type,
           p.image_filename, p.image_size, i.data
    FROM products p
    LEFT JOIN product_images i ON i.product_id = p.id
    WHERE p.id = :product_id
""")

# ---------------------------------------------------------------------------
# SQL: bids
# ---------------------------------------------------------------------------

_BID_COLUMNS = "id, product_id, user_id, amount, status, message, created_at, updated_at"

_LIST_LIVE_BIDS_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bids
    WHERE product_id = :product_id
      AND status IN ('pending', 'accepted')
    ORDER BY created_at, CAST(id AS BIGINT)
""")

_LIST_LIVE_BIDS_FOR_PRODUCTS_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bids
    WHERE product_id = ANY(CAST(:product_ids AS TEXT[]))
      AND status IN ('pending', 'accepted')
    ORDER BY created_at, CAST(id AS BIGINT)
""")

_GET_BID_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bids
    WHERE id = :bid_id
""")

_LIST_BIDS_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bids
    WHERE (CAST(:product_id AS TEXT) IS NULL OR product_id = CAST(:product_id AS TEXT))
      AND (CAST(:user_id AS TEXT) IS NULL OR user_id = CAST(:user_id AS TEXT))
      AND (CAST(:statuses_csv AS TEXT) IS NULL
           OR status = ANY(string_to_array(CAST(:statuses_csv AS TEXT), ',')))
    ORDER BY created_at DESC, CAST(id AS BIGINT) DESC
""")

_INSERT_BID_SQL = text("""
    INSERT INTO bids (id, product_id, user_id, amount, status, message, created_at, updated_at)
    VALUES (:id, :product_id, :user_id, :amount, :status, :message, :created_at, :updated_at)
""")

_DELETE_BID_SQL = text("""
    DELETE FROM bids WHERE id = :bid_id
""")

_DELETE_BIDS_FOR_PRODUCT_SQL = text("""
    DELETE FROM bids WHERE product_id = :product_id
""")

_UPDATE_BID_STATUS_SQL = text("""
    UPDATE bids
    SET status = :status, updated_at = NOW()
    WHERE id = :bid_id
""")

_REJECT_PENDING_SIBLINGS_SQL = text("""
    UPDATE bids
    SET status = 'rejected', updated_at = NOW()
    WHERE product_id = :product_id
      AND id <> :bid_id
      AND status = 'pending'
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_image(row: Any, data: bytes | None = None) -> ImageRef | None:
    if row.image_kind == "external":
        return ExternalImage(url=row.image_url)
    if row.image_kind == "stored":
        return StoredImage(
            content_type=row.image_content_type,
            size=row.image_size or 0,
            filename=row.image_filename,
            data=data,
        )
    return None


def _row_to_bid(row: Any) -> Bid:
    return Bid(
        id=row.id,
        product_id=row.product_id,
        user_id=row.user_id,
        amount=row.amount,
        status=row.status,
        message=row.message,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_product(row: Any, bids: list[Bid]) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        description=row.description,
        owner=row.owner,
        price=row.price,
        image=_row_to_image(row),
        demand_value=row.demand_value,
        dao_id=row.dao_id,
        on_market=row.on_market,
        personal_item=row.personal_item,
        years_of_use=row.years_of_use,
        authenticity_certificate=row.authenticity_certificate,
        is_market_item=row.is_market_item,
        initial_bid=row.initial_bid,
        demand_price=row.demand_price,
        is_rentable=row.is_rentable,
        bids=bids,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _image_params(image: ImageRef | None) -> dict[str, Any]:
    if isinstance(image, StoredImage):
        return {
            "image_kind": "stored",
            "image_url": None,
            "image_content_type": image.content_type,
            "image_filename": image.filename,
            "image_size": image.size,
        }
    if isinstance(image, ExternalImage):
        return {
            "image_kind": "external",
            "image_url": image.url,
            "image_content_type": None,
            "image_filename": None,
            "image_size": None,
        }
    return {
        "image_kind": None,
        "image_url": None,
        "image_content_type": None,
        "image_filename": None,
        "image_size": None,
    }


def _product_params(product: Product) -> dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "owner": product.owner,
        "price": product.price,
        "demand_value": product.demand_value,
        "dao_id": product.dao_id,
        "on_market": product.on_market,
        "personal_item": product.personal_item,
        "years_of_use": product.years_of_use,
        "authenticity_certificate": product.authenticity_certificate,
        "is_market_item": product.is_market_item,
        "initial_bid": product.initial_bid,
        "demand_price": product.demand_price,
        "is_rentable": product.is_rentable,
        **_image_params(product.image),
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ProductRepository:
    """Concrete repository over the products, product_images and bids tables."""

    async def get_product(
        self, db: AsyncSession, product_id: str, for_update: bool = False
    ) -> Product | None:
        sql = _GET_PRODUCT_FOR_UPDATE_SQL if for_update else _GET_PRODUCT_SQL
        result = await db.execute(sql, {"product_id": product_id})
        row = result.fetchone()
        if row is None:
            return None
        bids = await self.list_live_bids(db, product_id)
        return _row_to_product(row, bids)

    async def list_products(
        self,
        db: AsyncSession,
        owner: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Product]:
        result = await db.execute(
            _LIST_PRODUCTS_SQL,
            {"owner": owner, "cursor_id": cursor_id, "limit": limit},
        )
        rows = result.fetchall()
        if not rows:
            return []

        # One round trip for the bids of the whole page
        bids_result = await db.execute(
            _LIST_LIVE_BIDS_FOR_PRODUCTS_SQL,
            {"product_ids": [row.id for row in rows]},
        )
        bids_by_product: dict[str, list[Bid]] = {}
        for bid_row in bids_result.fetchall():
            bids_by_product.setdefault(bid_row.product_id, []).append(_row_to_bid(bid_row))

        return [_row_to_product(row, bids_by_product.get(row.id, [])) for row in rows]

    async def insert_product(self, db: AsyncSession, product: Product) -> None:
        params = _product_params(product)
        params["created_at"] = product.created_at
        params["updated_at"] = product.updated_at
        await db.execute(_INSERT_PRODUCT_SQL, params)
        if isinstance(product.image, StoredImage) and product.image.data is not None:
            await db.execute(
                _UPSERT_IMAGE_SQL,
                {"product_id": product.id, "data": product.image.data},
            )

    async def update_product(self, db: AsyncSession, product: Product) -> None:
        result = await db.execute(_UPDATE_PRODUCT_SQL, _product_params(product))
        row = result.fetchone()
        if row is not None:
            product.version = row.version
            product.updated_at = row.updated_at
        if isinstance(product.image, ExternalImage):
            await db.execute(_DELETE_IMAGE_SQL, {"product_id": product.id})

    async def delete_product(self, db: AsyncSession, product_id: str) -> int:
        # bids and product_images also cascade via FK; deleting bids explicitly
        # reports how many went away
        bids_result = await db.execute(
            _DELETE_BIDS_FOR_PRODUCT_SQL, {"product_id": product_id}
        )
        await db.execute(_DELETE_PRODUCT_SQL, {"product_id": product_id})
        return bids_result.rowcount or 0

    async def get_image(self, db: AsyncSession, product_id: str) -> ImageRef | None:
        result = await db.execute(_GET_IMAGE_SQL, {"product_id": product_id})
        row = result.fetchone()
        if row is None:
            return None
        return _row_to_image(row, data=row.data)

    async def list_live_bids(self, db: AsyncSession, product_id: str) -> list[Bid]:
        result = await db.execute(_LIST_LIVE_BIDS_SQL, {"product_id": product_id})
        return [_row_to_bid(row) for row in result.fetchall()]

    async def get_bid(self, db: AsyncSession, bid_id: str) -> Bid | None:
        result = await db.execute(_GET_BID_SQL, {"bid_id": bid_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def list_bids(
        self,
        db: AsyncSession,
        product_id: str | None,
        user_id: str | None,
        statuses: list[str] | None,
    ) -> list[Bid]:
        statuses_csv = ",".join(statuses) if statuses else None
        result = await db.execute(
            _LIST_BIDS_SQL,
            {"product_id": product_id, "user_id": user_id, "statuses_csv": statuses_csv},
        )
        return [_row_to_bid(row) for row in result.fetchall()]

    async def insert_bid(self, db: AsyncSession, bid: Bid) -> None:
        await db.execute(
            _INSERT_BID_SQL,
            {
                "id": bid.id,
                "product_id": bid.product_id,
                "user_id": bid.user_id,
                "amount": bid.amount,
                "status": bid.status,
                "message": bid.message,
                "created_at": bid.created_at,
                "updated_at": bid.updated_at,
            },
        )

    async def delete_bid(self, db: AsyncSession, bid_id: str) -> None:
        await db.execute(_DELETE_BID_SQL, {"bid_id": bid_id})

    async def delete_bids_for_product(self, db: AsyncSession, product_id: str) -> int:
        result = await db.execute(_DELETE_BIDS_FOR_PRODUCT_SQL, {"product_id": product_id})
        return result.rowcount or 0

    async def update_bid_status(self, db: AsyncSession, bid_id: str, status: str) -> None:
        await db.execute(_UPDATE_BID_STATUS_SQL, {"bid_id": bid_id, "status": status})

    async def reject_pending_siblings(
        self, db: AsyncSession, product_id: str, accepted_bid_id: str
    ) -> int:
        result = await db.execute(
            _REJECT_PENDING_SIBLINGS_SQL,
            {"product_id": product_id, "bid_id": accepted_bid_id},
        )
        return result.rowcount or 0


