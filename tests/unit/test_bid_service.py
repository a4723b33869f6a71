"""Unit tests for BidRecordService — bid status transitions."""

from unittest.mock import AsyncMock

import pytest

from src.sx_common.errors import (
    BidAlreadyAcceptedError,
    BidNotFoundError,
    BidNotPendingError,
    InvalidBidStatusError,
    InvalidIdError,
    ProductForbiddenError,
)
from src.sx_product.application.bid_service import BidRecordService
from src.sx_product.application.schemas import ProductCreateRequest
from src.sx_product.application.service import ProductLifecycleService
from tests.fakes import InMemoryProductRepository

OWNER = "owner-1"


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def repo() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def lifecycle(repo) -> ProductLifecycleService:
    return ProductLifecycleService(repo=repo)


@pytest.fixture
def service(lifecycle) -> BidRecordService:
    return BidRecordService(lifecycle)


async def _product_with_bids(lifecycle, db, amounts, bidders=None) -> tuple[str, list[str]]:
    req = ProductCreateRequest(
        name="Bike", description="Road bike", price=100.0,
        image_url="https://img.example.com/bike.jpg",
    )
    product = await lifecycle.create_product(db, OWNER, req)
    bid_ids = []
    for i, amount in enumerate(amounts):
        bidder = bidders[i] if bidders else f"bidder-{i}"
        _, bid = await lifecycle.add_bid(db, product.id, bidder, amount)
        bid_ids.append(bid.id)
    return product.id, bid_ids


class TestSetStatus:
    async def test_accept_rejects_pending_siblings(self, service, lifecycle, db, repo) -> None:
        product_id, (b1, b2, b3) = await _product_with_bids(lifecycle, db, [10, 20, 30])

        resp = await service.set_status(db, b2, OWNER, "accepted")

        assert resp.bid.status == "accepted"
        assert resp.rejected_bids == 2
        assert repo.bids[b1].status == "rejected"
        assert repo.bids[b3].status == "rejected"
        # Only the accepted bid still counts
        assert resp.demand_value == 80.0
        assert repo.stored(product_id).bid_amounts == [2_000]

    async def test_reject_leaves_live_projection(self, service, lifecycle, db, repo) -> None:
        product_id, (b1, b2) = await _product_with_bids(lifecycle, db, [10, 20])

        resp = await service.set_status(db, b1, OWNER, "rejected")

        assert resp.rejected_bids == 0
        assert resp.demand_value == 80.0
        assert repo.stored(product_id).bid_amounts == [2_000]
        assert repo.bids[b2].status == "pending"

    async def test_terminal_status_cannot_change(self, service, lifecycle, db) -> None:
        _, (b1,) = await _product_with_bids(lifecycle, db, [10])
        await service.set_status(db, b1, OWNER, "accepted")

        with pytest.raises(BidNotPendingError) as exc_info:
            await service.set_status(db, b1, OWNER, "rejected")
        assert exc_info.value.http_status == 409

    async def test_second_accept_refused(self, service, lifecycle, db, repo) -> None:
        product_id, (first,) = await _product_with_bids(
            lifecycle, db, [10], bidders=["alice"]
        )
        await service.set_status(db, first, OWNER, "accepted")
        _, late = await lifecycle.add_bid(db, product_id, "bob", 20)

        with pytest.raises(BidAlreadyAcceptedError) as exc_info:
            await service.set_status(db, late.id, OWNER, "accepted")

        assert exc_info.value.http_status == 409
        accepted = [b.id for b in repo.bids.values() if b.status == "accepted"]
        assert accepted == [first]
        assert repo.bids[late.id].status == "pending"

    async def test_late_bid_can_still_be_rejected(self, service, lifecycle, db, repo) -> None:
        product_id, (first,) = await _product_with_bids(lifecycle, db, [10])
        await service.set_status(db, first, OWNER, "accepted")
        _, late = await lifecycle.add_bid(db, product_id, "bob", 20)

        resp = await service.set_status(db, late.id, OWNER, "rejected")

        assert resp.bid.status == "rejected"
        assert resp.demand_value == 90.0

    async def test_accept_leaves_other_products_alone(
        self, service, lifecycle, db, repo
    ) -> None:
        _, (chosen, _) = await _product_with_bids(lifecycle, db, [10, 20])
        other_id, other_bids = await _product_with_bids(lifecycle, db, [30, 40])
        before = repo.stored(other_id)

        await service.set_status(db, chosen, OWNER, "accepted")

        after = repo.stored(other_id)
        assert [repo.bids[b].status for b in other_bids] == ["pending", "pending"]
        assert after.demand_value == before.demand_value == 3_000
        assert after.bid_amounts == [3_000, 4_000]
        assert after.version == before.version

    @pytest.mark.parametrize("status", ["pending", "ACCEPTED", "cancelled", ""])
    async def test_invalid_target_status(self, service, status) -> None:
        with pytest.raises(InvalidBidStatusError):
            await service.set_status(AsyncMock(), "123", OWNER, status)

    async def test_only_product_owner(self, service, lifecycle, db, repo) -> None:
        _, (b1,) = await _product_with_bids(lifecycle, db, [10])
        with pytest.raises(ProductForbiddenError):
            await service.set_status(db, b1, "bidder-0", "accepted")
        assert repo.bids[b1].status == "pending"

    async def test_unknown_bid(self, service, db) -> None:
        with pytest.raises(BidNotFoundError):
            await service.set_status(db, "999", OWNER, "accepted")

    async def test_malformed_bid_id(self, service, db) -> None:
        with pytest.raises(InvalidIdError):
            await service.set_status(db, "abc", OWNER, "accepted")


class TestListAndPlace:
    async def test_list_filters_by_user_and_status(self, service, lifecycle, db) -> None:
        product_id, (b1, b2) = await _product_with_bids(
            lifecycle, db, [10, 20], bidders=["alice", "bob"]
        )
        await service.set_status(db, b1, OWNER, "rejected")

        by_bob = await service.list_bids(db, None, "bob", None)
        assert [b.id for b in by_bob] == [b2]

        rejected = await service.list_bids(db, product_id, None, "rejected")
        assert [b.id for b in rejected] == [b1]

    async def test_list_newest_first(self, service, lifecycle, db) -> None:
        product_id, bid_ids = await _product_with_bids(lifecycle, db, [1, 2, 3])
        listed = await service.list_bids(db, product_id, None, None)
        assert [b.id for b in listed] == list(reversed(bid_ids))

    async def test_list_rejects_unknown_status(self, service, db) -> None:
        with pytest.raises(InvalidBidStatusError):
            await service.list_bids(db, None, None, "won")

    async def test_place_bid_returns_record(self, service, lifecycle, db) -> None:
        product_id, _ = await _product_with_bids(lifecycle, db, [])
        bid = await service.place_bid(db, product_id, "carol", 12.34, "Is it still available?")
        assert bid.user_id == "carol"
        assert bid.amount == 12.34
        assert bid.status == "pending"
        assert bid.message == "Is it still available?"
