"""Demand value: the residual valuation of a product after its live bids.

    base   = price - initial_bid   if market item with a positive initial bid
           = price                 otherwise
    demand = max(0, base - sum(bids))

Inputs are int cents, so the result is exact. Preconditions (price > 0,
0 < initial_bid < price for market items) are enforced by the lifecycle
service before anything reaches this module.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from src.sx_common.money import average_cents
from src.sx_product.domain.models import Product


def base_price(price: int, is_market_item: bool, initial_bid: int | None) -> int:
    if is_market_item and initial_bid is not None and initial_bid > 0:
        return price - initial_bid
    return price


def compute_demand_value(
    price: int,
    is_market_item: bool,
    initial_bid: int | None,
    bids: Iterable[int],
) -> int:
    return max(0, base_price(price, is_market_item, initial_bid) - sum(bids))


def demand_value_for(product: Product) -> int:
    """Demand value of a product's current stored inputs."""
    return compute_demand_value(
        product.price,
        product.is_market_item,
        product.initial_bid,
        product.bid_amounts,
    )


@dataclass(frozen=True)
class BidStats:
    count: int
    total: int
    average: int
    highest: int


def summarize_bids(bids: Sequence[int]) -> BidStats:
    total = sum(bids)
    return BidStats(
        count=len(bids),
        total=total,
        average=average_cents(total, len(bids)),
        highest=max(bids) if bids else 0,
    )
