"""BidRecordService — bids as records with a bidder and a status.

Status machine:
    pending -> accepted   (every other pending bid on the product -> rejected)
    pending -> rejected
accepted and rejected are terminal. A product holds at most one accepted bid:
once one is accepted, later bids can only be rejected.

Rejected bids leave the live projection, so a status change recomputes the
product's demand value under the same product row lock as any other bid
mutation.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import transactional
from src.sx_common.enums import BidStatus
from src.sx_common.errors import (
    BidAlreadyAcceptedError,
    BidNotFoundError,
    BidNotPendingError,
    InvalidBidStatusError,
)
from src.sx_common.money import from_cents
from src.sx_product.application.schemas import BidOut, BidStatusResponse
from src.sx_product.application.service import ProductLifecycleService, check_id
from src.sx_product.domain.access import ensure_owner

_TARGET_STATUSES = frozenset({BidStatus.ACCEPTED.value, BidStatus.REJECTED.value})
_ALL_STATUSES = frozenset(s.value for s in BidStatus)


class BidRecordService:
    def __init__(
        self,
        lifecycle: ProductLifecycleService | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._lifecycle = lifecycle or ProductLifecycleService()
        self._repo = self._lifecycle.repo
        self._log = logger or logging.getLogger("stakex.bids")

    async def list_bids(
        self,
        db: AsyncSession,
        product_id: str | None,
        user_id: str | None,
        status: str | None,
    ) -> list[BidOut]:
        if product_id is not None:
            check_id(product_id)
        if status is not None and status not in _ALL_STATUSES:
            raise InvalidBidStatusError(status)
        bids = await self._repo.list_bids(
            db, product_id, user_id, [status] if status else None
        )
        return [BidOut.from_domain(b) for b in bids]

    async def place_bid(
        self,
        db: AsyncSession,
        product_id: str,
        actor_id: str,
        amount: Any,
        message: str | None,
    ) -> BidOut:
        _, bid = await self._lifecycle.add_bid(db, product_id, actor_id, amount, message)
        return BidOut.from_domain(bid)

    async def set_status(
        self, db: AsyncSession, bid_id: str, actor_id: str, status: str
    ) -> BidStatusResponse:
        check_id(bid_id, kind="bid")
        if status not in _TARGET_STATUSES:
            raise InvalidBidStatusError(status)

        async with transactional(db):
            bid = await self._repo.get_bid(db, bid_id)
            if bid is None:
                raise BidNotFoundError(bid_id)
            product = await self._lifecycle.lock_product(db, bid.product_id)
            ensure_owner(product, actor_id, "change bid status")

            # Re-read under the product lock: every bid writer holds it
            bid = await self._repo.get_bid(db, bid_id)
            if bid is None:
                raise BidNotFoundError(bid_id)
            if bid.status != BidStatus.PENDING.value:
                raise BidNotPendingError(bid_id, bid.status)
            if status == BidStatus.ACCEPTED.value and any(
                b.status == BidStatus.ACCEPTED.value for b in product.bids
            ):
                raise BidAlreadyAcceptedError(product.id)

            await self._repo.update_bid_status(db, bid.id, status)
            bid.status = status
            rejected = 0
            if status == BidStatus.ACCEPTED.value:
                rejected = await self._repo.reject_pending_siblings(db, product.id, bid.id)

            product.bids = await self._repo.list_live_bids(db, product.id)
            await self._lifecycle.save_with_demand_value(db, product)

        self._log.info(
            "bid %s product=%s bid=%s actor=%s auto_rejected=%d demand_value=%d",
            status, product.id, bid.id, actor_id, rejected, product.demand_value,
        )
        return BidStatusResponse(
            bid=BidOut.from_domain(bid),
            rejected_bids=rejected,
            demand_value=from_cents(product.demand_value),
        )
