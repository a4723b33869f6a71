"""UserListsService — cart, purchase history, ongoing bids and sell list.

Every operation is scoped to the authenticated caller. Ongoing bids are not
stored here: they are the caller's live rows of the bids table.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import transactional
from src.sx_common.datetime_utils import utc_now
from src.sx_common.enums import LIVE_BID_STATUSES
from src.sx_common.errors import (
    CartItemExistsError,
    CartItemNotFoundError,
    HistoryItemNotFoundError,
    InvalidListPayloadError,
    ProductNotFoundError,
    SellForbiddenError,
    SellItemNotFoundError,
)
from src.sx_common.id_generator import generate_id, is_valid_id
from src.sx_common.money import average_cents, from_cents, is_number, to_cents
from src.sx_product.application.schemas import BidOut
from src.sx_product.application.service import check_id
from src.sx_product.domain.models import Product
from src.sx_product.domain.repository import ProductRepositoryProtocol
from src.sx_product.infrastructure.persistence import ProductRepository
from src.sx_user_lists.application.schemas import (
    CartItemOut,
    CartResponse,
    HistoryOrderOut,
    HistoryRecordRequest,
    HistoryResponse,
    HistoryStatsResponse,
    OngoingBidsResponse,
    SellItemOut,
    SellListResponse,
)
from src.sx_user_lists.domain.models import HistoryOrder
from src.sx_user_lists.domain.repository import UserListsRepositoryProtocol
from src.sx_user_lists.infrastructure.persistence import UserListsRepository


def _non_negative_cents(value: Any) -> int | None:
    """None when value is not a JSON number >= 0."""
    if not is_number(value) or value < 0:
        return None
    try:
        return to_cents(value)
    except ValueError:
        return None


def parse_history_payload(req: HistoryRecordRequest) -> list[tuple[str, int]]:
    """Normalize both payload shapes to [(product_id, price_cents), ...]."""
    if req.items is not None:
        if not isinstance(req.items, list):
            raise InvalidListPayloadError("items must be an array")
        raw = req.items
    else:
        raw = [{"productId": req.product_id, "priceAtPurchase": req.price_at_purchase}]
    if not raw:
        raise InvalidListPayloadError("No items provided")

    parsed: list[tuple[str, int]] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise InvalidListPayloadError()
        product_id = entry.get("productId")
        cents = _non_negative_cents(entry.get("priceAtPurchase"))
        if not isinstance(product_id, str) or not is_valid_id(product_id) or cents is None:
            raise InvalidListPayloadError()
        parsed.append((product_id, cents))
    return parsed


class UserListsService:
    def __init__(
        self,
        repo: UserListsRepositoryProtocol | None = None,
        products: ProductRepositoryProtocol | None = None,
        logger: logging.Logger | None = None,
        api_prefix: str = "/api",
    ) -> None:
        self._repo: UserListsRepositoryProtocol = repo or UserListsRepository()
        self._products: ProductRepositoryProtocol = products or ProductRepository()
        self._log = logger or logging.getLogger("stakex.user_lists")
        self._api_prefix = api_prefix

    async def _require_product(self, db: AsyncSession, product_id: str) -> Product:
        check_id(product_id)
        product = await self._products.get_product(db, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    async def get_cart(self, db: AsyncSession, user_id: str) -> CartResponse:
        items = await self._repo.list_cart(db, user_id)
        return CartResponse(cart=[CartItemOut.from_domain(i, self._api_prefix) for i in items])

    async def add_to_cart(self, db: AsyncSession, user_id: str, product_id: str) -> CartResponse:
        async with transactional(db):
            await self._require_product(db, product_id)
            if not await self._repo.add_cart_item(db, user_id, product_id):
                raise CartItemExistsError()
        self._log.info("cart add user=%s product=%s", user_id, product_id)
        return await self.get_cart(db, user_id)

    async def remove_from_cart(
        self, db: AsyncSession, user_id: str, product_id: str
    ) -> CartResponse:
        check_id(product_id)
        async with transactional(db):
            if not await self._repo.remove_cart_item(db, user_id, product_id):
                raise CartItemNotFoundError()
        return await self.get_cart(db, user_id)

    async def clear_cart(self, db: AsyncSession, user_id: str) -> CartResponse:
        async with transactional(db):
            removed = await self._repo.clear_cart(db, user_id)
        self._log.info("cart cleared user=%s items=%d", user_id, removed)
        return CartResponse(cart=[])

    # ------------------------------------------------------------------
    # Purchase history
    # ------------------------------------------------------------------

    async def _history_out(self, db: AsyncSession, user_id: str) -> list[HistoryOrderOut]:
        orders = await self._repo.list_history(db, user_id)
        return [HistoryOrderOut.from_domain(o, self._api_prefix) for o in orders]

    async def get_history(self, db: AsyncSession, user_id: str) -> HistoryResponse:
        return HistoryResponse(history_orders=await self._history_out(db, user_id))

    async def record_purchases(
        self, db: AsyncSession, user_id: str, req: HistoryRecordRequest
    ) -> HistoryResponse:
        entries = parse_history_payload(req)
        async with transactional(db):
            for product_id in dict.fromkeys(pid for pid, _ in entries):
                await self._require_product(db, product_id)
            now = utc_now()
            await self._repo.insert_history(
                db,
                [
                    HistoryOrder(
                        id=generate_id(),
                        user_id=user_id,
                        product_id=product_id,
                        price_at_purchase=cents,
                        purchased_at=now,
                    )
                    for product_id, cents in entries
                ],
            )
            if req.clear_cart:
                await self._repo.clear_cart(db, user_id)

        self._log.info(
            "purchases recorded user=%s orders=%d clear_cart=%s",
            user_id, len(entries), req.clear_cart,
        )
        cart = await self.get_cart(db, user_id)
        return HistoryResponse(history_orders=await self._history_out(db, user_id), cart=cart.cart)

    async def remove_history(
        self, db: AsyncSession, user_id: str, product_id: str
    ) -> HistoryResponse:
        check_id(product_id)
        async with transactional(db):
            if not await self._repo.delete_history_for_product(db, user_id, product_id):
                raise HistoryItemNotFoundError()
        return await self.get_history(db, user_id)

    async def history_stats(self, db: AsyncSession, user_id: str) -> HistoryStatsResponse:
        orders, spent = await self._repo.history_totals(db, user_id)
        return HistoryStatsResponse(
            total_orders=orders,
            total_spent=from_cents(spent),
            average_order_value=from_cents(average_cents(spent, orders)),
        )

    # ------------------------------------------------------------------
    # Ongoing bids
    # ------------------------------------------------------------------

    async def ongoing_bids(self, db: AsyncSession, user_id: str) -> OngoingBidsResponse:
        bids = await self._products.list_bids(db, None, user_id, list(LIVE_BID_STATUSES))
        return OngoingBidsResponse(ongoing_bids=[BidOut.from_domain(b) for b in bids])

    # ------------------------------------------------------------------
    # Items to sell
    # ------------------------------------------------------------------

    async def get_sell_list(self, db: AsyncSession, user_id: str) -> SellListResponse:
        items = await self._repo.list_sell(db, user_id)
        return SellListResponse(
            items_to_sell=[SellItemOut.from_domain(i, self._api_prefix) for i in items]
        )

    async def list_for_sale(
        self, db: AsyncSession, user_id: str, product_id: str, asking_price: Any
    ) -> SellListResponse:
        cents = None
        if asking_price is not None:
            cents = _non_negative_cents(asking_price)
            if cents is None:
                raise InvalidListPayloadError("askingPrice must be a number >= 0")
        async with transactional(db):
            product = await self._require_product(db, product_id)
            if product.owner != user_id:
                raise SellForbiddenError()
            await self._repo.upsert_sell_item(db, user_id, product_id, cents)
        self._log.info("listed for sale user=%s product=%s", user_id, product_id)
        return await self.get_sell_list(db, user_id)

    async def update_asking_price(
        self, db: AsyncSession, user_id: str, product_id: str, asking_price: Any
    ) -> SellListResponse:
        check_id(product_id)
        cents = _non_negative_cents(asking_price)
        if cents is None:
            raise InvalidListPayloadError("askingPrice must be a number >= 0")
        async with transactional(db):
            if not await self._repo.update_sell_price(db, user_id, product_id, cents):
                raise SellItemNotFoundError()
        return await self.get_sell_list(db, user_id)

    async def unlist(self, db: AsyncSession, user_id: str, product_id: str) -> SellListResponse:
        check_id(product_id)
        async with transactional(db):
            if not await self._repo.remove_sell_item(db, user_id, product_id):
                raise SellItemNotFoundError()
        return await self.get_sell_list(db, user_id)
