"""Unit tests for UserListsService using mock repositories."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.sx_common.errors import (
    CartItemExistsError,
    CartItemNotFoundError,
    HistoryItemNotFoundError,
    InvalidIdError,
    InvalidListPayloadError,
    ProductNotFoundError,
    SellForbiddenError,
    SellItemNotFoundError,
)
from src.sx_product.domain.models import Bid, ExternalImage, Product, StoredImage
from src.sx_user_lists.application.schemas import HistoryRecordRequest
from src.sx_user_lists.application.service import UserListsService, parse_history_payload
from src.sx_user_lists.domain.models import CartItem, ProductBrief

USER = "user-1"
PRODUCT_ID = "1001"


def _product(owner: str = USER) -> Product:
    return Product(id=PRODUCT_ID, name="Chair", description="Oak", owner=owner, price=5_000)


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def repo() -> MagicMock:
    repo = MagicMock()
    repo.list_cart = AsyncMock(return_value=[])
    repo.list_history = AsyncMock(return_value=[])
    repo.list_sell = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def products() -> MagicMock:
    products = MagicMock()
    products.get_product = AsyncMock(return_value=_product(owner="someone-else"))
    return products


@pytest.fixture
def service(repo, products) -> UserListsService:
    return UserListsService(repo=repo, products=products)


class TestCart:
    async def test_add_unknown_product(self, service, products, db) -> None:
        products.get_product = AsyncMock(return_value=None)
        with pytest.raises(ProductNotFoundError):
            await service.add_to_cart(db, USER, PRODUCT_ID)

    async def test_add_duplicate(self, service, repo, db) -> None:
        repo.add_cart_item = AsyncMock(return_value=False)
        with pytest.raises(CartItemExistsError):
            await service.add_to_cart(db, USER, PRODUCT_ID)

    async def test_add_returns_cart_with_briefs(self, service, repo, db) -> None:
        repo.add_cart_item = AsyncMock(return_value=True)
        repo.list_cart = AsyncMock(return_value=[
            CartItem(
                user_id=USER, product_id=PRODUCT_ID,
                added_at=datetime(2025, 1, 1, tzinfo=UTC),
                product=ProductBrief(
                    id=PRODUCT_ID, name="Chair", price=5_000, on_market=True,
                    image=StoredImage(content_type="image/jpeg", size=10),
                ),
            )
        ])

        resp = await service.add_to_cart(db, USER, PRODUCT_ID)

        item = resp.to_wire()["cart"][0]
        assert item["productId"] == PRODUCT_ID
        assert item["product"]["price"] == 50.0
        assert item["product"]["imageUrl"] == f"/api/posts/{PRODUCT_ID}/image"

    async def test_invalid_product_id(self, service, db) -> None:
        with pytest.raises(InvalidIdError):
            await service.add_to_cart(db, USER, "chair")

    async def test_remove_missing(self, service, repo, db) -> None:
        repo.remove_cart_item = AsyncMock(return_value=0)
        with pytest.raises(CartItemNotFoundError):
            await service.remove_from_cart(db, USER, PRODUCT_ID)

    async def test_clear(self, service, repo, db) -> None:
        repo.clear_cart = AsyncMock(return_value=3)
        resp = await service.clear_cart(db, USER)
        assert resp.cart == []
        repo.clear_cart.assert_awaited_once_with(db, USER)


class TestHistoryPayload:
    def test_single_item(self) -> None:
        req = HistoryRecordRequest(product_id=PRODUCT_ID, price_at_purchase=19.99)
        assert parse_history_payload(req) == [(PRODUCT_ID, 1_999)]

    def test_items(self) -> None:
        req = HistoryRecordRequest.model_validate({
            "items": [
                {"productId": "1", "priceAtPurchase": 0},
                {"productId": "2", "priceAtPurchase": 5},
            ],
            "clearCart": True,
        })
        assert parse_history_payload(req) == [("1", 0), ("2", 500)]
        assert req.clear_cart is True

    @pytest.mark.parametrize(
        "body",
        [
            {"items": []},
            {"items": "nope"},
            {"items": [{"productId": "1", "priceAtPurchase": -1}]},
            {"items": [{"productId": "1", "priceAtPurchase": "5"}]},
            {"items": [{"productId": "abc", "priceAtPurchase": 5}]},
            {"productId": "1"},
            {},
        ],
    )
    def test_invalid(self, body) -> None:
        with pytest.raises(InvalidListPayloadError):
            parse_history_payload(HistoryRecordRequest.model_validate(body))


class TestHistory:
    async def test_record_and_clear_cart(self, service, repo, db) -> None:
        repo.insert_history = AsyncMock()
        repo.clear_cart = AsyncMock(return_value=1)
        req = HistoryRecordRequest.model_validate({
            "items": [{"productId": PRODUCT_ID, "priceAtPurchase": 50}],
            "clearCart": True,
        })

        resp = await service.record_purchases(db, USER, req)

        orders = repo.insert_history.call_args.args[1]
        assert [(o.product_id, o.price_at_purchase) for o in orders] == [(PRODUCT_ID, 5_000)]
        repo.clear_cart.assert_awaited_once()
        assert resp.cart == []

    async def test_record_unknown_product(self, service, repo, products, db) -> None:
        products.get_product = AsyncMock(return_value=None)
        repo.insert_history = AsyncMock()
        req = HistoryRecordRequest(product_id=PRODUCT_ID, price_at_purchase=1)
        with pytest.raises(ProductNotFoundError):
            await service.record_purchases(db, USER, req)
        repo.insert_history.assert_not_called()

    async def test_remove_missing(self, service, repo, db) -> None:
        repo.delete_history_for_product = AsyncMock(return_value=0)
        with pytest.raises(HistoryItemNotFoundError):
            await service.remove_history(db, USER, PRODUCT_ID)

    async def test_stats(self, service, repo, db) -> None:
        repo.history_totals = AsyncMock(return_value=(3, 10_000))
        stats = await service.history_stats(db, USER)
        assert stats.total_orders == 3
        assert stats.total_spent == 100.0
        assert stats.average_order_value == 33.33

    async def test_stats_empty(self, service, repo, db) -> None:
        repo.history_totals = AsyncMock(return_value=(0, 0))
        stats = await service.history_stats(db, USER)
        assert stats.average_order_value == 0.0


class TestOngoingBids:
    async def test_reads_live_bids_of_caller(self, service, products, db) -> None:
        products.list_bids = AsyncMock(return_value=[
            Bid(id="5", product_id=PRODUCT_ID, user_id=USER, amount=700, status="accepted")
        ])

        resp = await service.ongoing_bids(db, USER)

        products.list_bids.assert_awaited_once_with(db, None, USER, ["pending", "accepted"])
        assert resp.ongoing_bids[0].amount == 7.0


class TestSell:
    async def test_only_owner_can_list(self, service, db) -> None:
        with pytest.raises(SellForbiddenError):
            await service.list_for_sale(db, USER, PRODUCT_ID, 10)

    async def test_owner_lists_with_price(self, service, repo, products, db) -> None:
        products.get_product = AsyncMock(return_value=_product(owner=USER))
        repo.upsert_sell_item = AsyncMock()
        await service.list_for_sale(db, USER, PRODUCT_ID, 12.5)
        repo.upsert_sell_item.assert_awaited_once_with(db, USER, PRODUCT_ID, 1_250)

    async def test_listing_without_price_keeps_none(self, service, repo, products, db) -> None:
        products.get_product = AsyncMock(return_value=_product(owner=USER))
        repo.upsert_sell_item = AsyncMock()
        await service.list_for_sale(db, USER, PRODUCT_ID, None)
        repo.upsert_sell_item.assert_awaited_once_with(db, USER, PRODUCT_ID, None)

    async def test_negative_asking_price(self, service, db) -> None:
        with pytest.raises(InvalidListPayloadError):
            await service.list_for_sale(db, USER, PRODUCT_ID, -1)

    async def test_patch_unlisted(self, service, repo, db) -> None:
        repo.update_sell_price = AsyncMock(return_value=0)
        with pytest.raises(SellItemNotFoundError):
            await service.update_asking_price(db, USER, PRODUCT_ID, 5)

    async def test_patch_requires_price(self, service, db) -> None:
        with pytest.raises(InvalidListPayloadError):
            await service.update_asking_price(db, USER, PRODUCT_ID, None)

    async def test_unlist_missing(self, service, repo, db) -> None:
        repo.remove_sell_item = AsyncMock(return_value=0)
        with pytest.raises(SellItemNotFoundError):
            await service.unlist(db, USER, PRODUCT_ID)

    async def test_external_image_brief(self, service, repo, db) -> None:
        from src.sx_user_lists.domain.models import SellItem

        repo.list_sell = AsyncMock(return_value=[
            SellItem(
                user_id=USER, product_id=PRODUCT_ID, asking_price=None,
                product=ProductBrief(
                    id=PRODUCT_ID, name="Chair", price=5_000, on_market=False,
                    image=ExternalImage(url="https://img.example.com/c.jpg"),
                ),
            )
        ])
        resp = await service.get_sell_list(db, USER)
        item = resp.items_to_sell[0]
        assert item.asking_price is None
        assert item.product.image_url == "https://img.example.com/c.jpg"
