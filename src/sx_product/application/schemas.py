"""Pydantic schemas for sx_product API requests and responses.

Wire format is camelCase (CamelModel). Money is a decimal number on the wire
and int cents in the domain; conversion uses src.sx_common.money.

Several request fields are typed Any on purpose: the service owns the
"positive number" checks so that malformed amounts produce the same 400
message whatever their JSON type.
"""

from typing import Any

from pydantic import ConfigDict, Field

from src.sx_common.datetime_utils import iso_or_none
from src.sx_common.money import from_cents
from src.sx_common.response import CamelModel
from src.sx_product.domain.demand import summarize_bids
from src.sx_product.domain.models import Bid, ExternalImage, ImageRef, Product, StoredImage

# ---------------------------------------------------------------------------
# Image resolution
# ---------------------------------------------------------------------------


def image_source(image: ImageRef | None) -> str | None:
    if isinstance(image, StoredImage):
        return "stored"
    if isinstance(image, ExternalImage):
        return "external"
    return None


def resolve_image_url(product_id: str, image: ImageRef | None, api_prefix: str) -> str | None:
    """Served URL: our own blob endpoint for stored images, the URL itself otherwise."""
    if isinstance(image, StoredImage):
        return f"{api_prefix}/posts/{product_id}/image"
    if isinstance(image, ExternalImage):
        return image.url
    return None


def _money_or_none(cents: int | None) -> float | None:
    return from_cents(cents) if cents is not None else None


# ---------------------------------------------------------------------------
# Product requests
# ---------------------------------------------------------------------------


class ProductCreateRequest(CamelModel):
    """Fields of the multipart create form; the image travels separately."""

    name: str
    description: str
    price: float
    image_url: str | None = None
    dao_id: str | None = None
    on_market: bool = False
    personal_item: bool = False
    years_of_use: int | None = None
    authenticity_certificate: str | None = None
    is_market_item: bool = False
    initial_bid: float | None = None
    demand_price: float | None = None
    is_rentable: bool = False


class ProductUpdateRequest(CamelModel):
    """Allow-listed update fields. Unknown keys are dropped, not rejected."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    description: str | None = None
    image: str | None = None  # external URL
    price: Any = None
    on_market: bool | None = None
    is_market_item: bool | None = None
    initial_bid: Any = None
    years_of_use: int | None = None
    authenticity_certificate: str | None = None
    demand_price: Any = None
    is_rentable: bool | None = None
    dao_id: str | None = None
    demand_value: Any = None  # explicit override, see ProductLifecycleService.update_product


# ---------------------------------------------------------------------------
# Product responses
# ---------------------------------------------------------------------------


class ProductOut(CamelModel):
    id: str
    name: str
    description: str
    image_url: str | None
    image_source: str | None
    price: float
    demand_value: float
    owner: str
    dao_id: str | None
    on_market: bool
    personal_item: bool
    years_of_use: int | None
    authenticity_certificate: str | None
    is_market_item: bool
    initial_bid: float | None
    demand_price: float | None
    is_rentable: bool
    bids: list[float]
    version: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, p: Product, api_prefix: str) -> "ProductOut":
        return cls(
            id=p.id,
            name=p.name,
            description=p.description,
            image_url=resolve_image_url(p.id, p.image, api_prefix),
            image_source=image_source(p.image),
            price=from_cents(p.price),
            demand_value=from_cents(p.demand_value),
            owner=p.owner,
            dao_id=p.dao_id,
            on_market=p.on_market,
            personal_item=p.personal_item,
            years_of_use=p.years_of_use,
            authenticity_certificate=p.authenticity_certificate,
            is_market_item=p.is_market_item,
            initial_bid=_money_or_none(p.initial_bid),
            demand_price=_money_or_none(p.demand_price),
            is_rentable=p.is_rentable,
            bids=[from_cents(a) for a in p.bid_amounts],
            version=p.version,
            created_at=iso_or_none(p.created_at),
            updated_at=iso_or_none(p.updated_at),
        )


class ProductListResponse(CamelModel):
    items: list[ProductOut]
    next_cursor: str | None
    has_more: bool


class DeleteProductResponse(CamelModel):
    product_id: str
    deleted_bids: int


# ---------------------------------------------------------------------------
# Bid requests
# ---------------------------------------------------------------------------


class AddBidRequest(CamelModel):
    amount: Any = None


class ReplaceBidsRequest(CamelModel):
    bids: Any = None


class PlaceBidRequest(CamelModel):
    product_id: str
    amount: Any = None
    message: str | None = Field(None, max_length=500)


class UpdateBidStatusRequest(CamelModel):
    status: str


# ---------------------------------------------------------------------------
# Bid responses
# ---------------------------------------------------------------------------


class BidSummaryResponse(CamelModel):
    product_id: str
    bids: list[float]
    total_bids: int
    total_amount: float
    average_bid: float
    highest_bid: float
    demand_value: float

    @classmethod
    def from_domain(cls, p: Product) -> "BidSummaryResponse":
        stats = summarize_bids(p.bid_amounts)
        return cls(
            product_id=p.id,
            bids=[from_cents(a) for a in p.bid_amounts],
            total_bids=stats.count,
            total_amount=from_cents(stats.total),
            average_bid=from_cents(stats.average),
            highest_bid=from_cents(stats.highest),
            demand_value=from_cents(p.demand_value),
        )


class RemoveBidResponse(BidSummaryResponse):
    removed_bid: float


class AddBidResponse(CamelModel):
    product_id: str
    new_bid: float
    total_bids: int
    total_amount: float
    demand_value: float

    @classmethod
    def from_domain(cls, p: Product, bid: Bid) -> "AddBidResponse":
        amounts = p.bid_amounts
        return cls(
            product_id=p.id,
            new_bid=from_cents(bid.amount),
            total_bids=len(amounts),
            total_amount=from_cents(sum(amounts)),
            demand_value=from_cents(p.demand_value),
        )


class BidOut(CamelModel):
    id: str
    product_id: str
    user_id: str | None
    amount: float
    status: str
    message: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, b: Bid) -> "BidOut":
        return cls(
            id=b.id,
            product_id=b.product_id,
            user_id=b.user_id,
            amount=from_cents(b.amount),
            status=b.status,
            message=b.message,
            created_at=iso_or_none(b.created_at),
            updated_at=iso_or_none(b.updated_at),
        )


class BidStatusResponse(CamelModel):
    bid: BidOut
    rejected_bids: int
    demand_value: float
