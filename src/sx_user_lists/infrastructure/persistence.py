"""Raw-SQL repository for cart_items, history_orders and sell_items.

List reads LEFT JOIN products so each entry comes back with a brief of the
product it points at (NULL brief once the product is gone).
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_product.domain.models import ExternalImage, ImageRef, StoredImage
from src.sx_user_lists.domain.models import CartItem, HistoryOrder, ProductBrief, SellItem

_BRIEF_COLUMNS = """
    p.id AS p_id, p.name AS p_name, p.price AS p_price, p.on_market AS p_on_market,
    p.image_kind AS p_image_kind, p.image_url AS p_image_url,
    p.image_content_type AS p_image_content_type, p.image_size AS p_image_size
"""

# --- cart ---

_LIST_CART_SQL = text(f"""
    SELECT c.user_id, c.product_id, c.added_at, {_BRIEF_COLUMNS}
    FROM cart_items c
    LEFT JOIN products p ON p.id = c.product_id
    WHERE c.user_id = :user_id
    ORDER BY c.added_at
""")

_ADD_CART_SQL = text("""
    INSERT INTO cart_items (user_id, product_id, added_at)
    VALUES (:user_id, :product_id, NOW())
    ON CONFLICT (user_id, product_id) DO NOTHING
""")

_REMOVE_CART_SQL = text("""
    DELETE FROM cart_items WHERE user_id = :user_id AND product_id = :product_id
""")

_CLEAR_CART_SQL = text("""
    DELETE FROM cart_items WHERE user_id = :user_id
""")

# --- history ---

_LIST_HISTORY_SQL = text(f"""
    SELECT h.id, h.user_id, h.product_id, h.price_at_purchase, h.purchased_at,
           {_BRIEF_COLUMNS}
    FROM history_orders h
    LEFT JOIN products p ON p.id = h.product_id
    WHERE h.user_id = :user_id
    ORDER BY h.purchased_at DESC, CAST(h.id AS BIGINT) DESC
""")

_INSERT_HISTORY_SQL = text("""
    INSERT INTO history_orders (id, user_id, product_id, price_at_purchase, purchased_at)
    VALUES (:id, :user_id, :product_id, :price_at_purchase, :purchased_at)
""")

_DELETE_HISTORY_SQL = text("""
    DELETE FROM history_orders WHERE user_id = :user_id AND product_id = :product_id
""")

_HISTORY_TOTALS_SQL = text("""
    SELECT COUNT(*) AS orders, COALESCE(SUM(price_at_purchase), 0) AS spent
    FROM history_orders
    WHERE user_id = :user_id
""")

# --- sell list ---

_LIST_SELL_SQL = text(f"""
    SELECT s.user_id, s.product_id, s.asking_price, s.listed_at, {_BRIEF_COLUMNS}
    FROM sell_items s
    LEFT JOIN products p ON p.id = s.product_id
    WHERE s.user_id = :user_id
    ORDER BY s.listed_at
""")

# A re-listing without askingPrice keeps the price already on record
_UPSERT_SELL_SQL = text("""
    INSERT INTO sell_items (user_id, product_id, asking_price, listed_at)
    VALUES (:user_id, :product_id, :asking_price, NOW())
    ON CONFLICT (user_id, product_id) DO UPDATE
    SET asking_price = COALESCE(EXCLUDED.asking_price, sell_items.asking_price)
""")

_UPDATE_SELL_PRICE_SQL = text("""
    UPDATE sell_items SET asking_price = :asking_price
    WHERE user_id = :user_id AND product_id = :product_id
""")

_REMOVE_SELL_SQL = text("""
    DELETE FROM sell_items WHERE user_id = :user_id AND product_id = :product_id
""")


def _row_to_brief(row: Any) -> ProductBrief | None:
    if row.p_id is None:
        return None
    image: ImageRef | None = None
    if row.p_image_kind == "stored":
        image = StoredImage(content_type=row.p_image_content_type, size=row.p_image_size)
    elif row.p_image_kind == "external":
        image = ExternalImage(url=row.p_image_url)
    return ProductBrief(
        id=row.p_id,
        name=row.p_name,
        price=int(row.p_price),
        on_market=bool(row.p_on_market),
        image=image,
    )


class UserListsRepository:
    async def list_cart(self, db: AsyncSession, user_id: str) -> list[CartItem]:
        result = await db.execute(_LIST_CART_SQL, {"user_id": user_id})
        return [
            CartItem(
                user_id=row.user_id,
                product_id=row.product_id,
                added_at=row.added_at,
                product=_row_to_brief(row),
            )
            for row in result.fetchall()
        ]

    async def add_cart_item(self, db: AsyncSession, user_id: str, product_id: str) -> bool:
        result = await db.execute(_ADD_CART_SQL, {"user_id": user_id, "product_id": product_id})
        return bool(result.rowcount)

    async def remove_cart_item(self, db: AsyncSession, user_id: str, product_id: str) -> int:
        result = await db.execute(
            _REMOVE_CART_SQL, {"user_id": user_id, "product_id": product_id}
        )
        return result.rowcount or 0

    async def clear_cart(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_CLEAR_CART_SQL, {"user_id": user_id})
        return result.rowcount or 0

    async def list_history(self, db: AsyncSession, user_id: str) -> list[HistoryOrder]:
        result = await db.execute(_LIST_HISTORY_SQL, {"user_id": user_id})
        return [
            HistoryOrder(
                id=row.id,
                user_id=row.user_id,
                product_id=row.product_id,
                price_at_purchase=int(row.price_at_purchase),
                purchased_at=row.purchased_at,
                product=_row_to_brief(row),
            )
            for row in result.fetchall()
        ]

    async def insert_history(self, db: AsyncSession, orders: list[HistoryOrder]) -> None:
        for order in orders:
            await db.execute(
                _INSERT_HISTORY_SQL,
                {
                    "id": order.id,
                    "user_id": order.user_id,
                    "product_id": order.product_id,
                    "price_at_purchase": order.price_at_purchase,
                    "purchased_at": order.purchased_at,
                },
            )

    async def delete_history_for_product(
        self, db: AsyncSession, user_id: str, product_id: str
    ) -> int:
        result = await db.execute(
            _DELETE_HISTORY_SQL, {"user_id": user_id, "product_id": product_id}
        )
        return result.rowcount or 0

    async def history_totals(self, db: AsyncSession, user_id: str) -> tuple[int, int]:
        result = await db.execute(_HISTORY_TOTALS_SQL, {"user_id": user_id})
        row = result.fetchone()
        return int(row.orders), int(row.spent)

    async def list_sell(self, db: AsyncSession, user_id: str) -> list[SellItem]:
        result = await db.execute(_LIST_SELL_SQL, {"user_id": user_id})
        return [
            SellItem(
                user_id=row.user_id,
                product_id=row.product_id,
                asking_price=int(row.asking_price) if row.asking_price is not None else None,
                listed_at=row.listed_at,
                product=_row_to_brief(row),
            )
            for row in result.fetchall()
        ]

    async def upsert_sell_item(
        self, db: AsyncSession, user_id: str, product_id: str, asking_price: int | None
    ) -> None:
        await db.execute(
            _UPSERT_SELL_SQL,
            {"user_id": user_id, "product_id": product_id, "asking_price": asking_price},
        )

    async def update_sell_price(
        self, db: AsyncSession, user_id: str, product_id: str, asking_price: int
    ) -> int:
        result = await db.execute(
            _UPDATE_SELL_PRICE_SQL,
            {"user_id": user_id, "product_id": product_id, "asking_price": asking_price},
        )
        return result.rowcount or 0

    async def remove_sell_item(self, db: AsyncSession, user_id: str, product_id: str) -> int:
        result = await db.execute(
            _REMOVE_SELL_SQL, {"user_id": user_id, "product_id": product_id}
        )
        return result.rowcount or 0
