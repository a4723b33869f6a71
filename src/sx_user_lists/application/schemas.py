"""Request/response schemas for /user list endpoints (camelCase on the wire)."""

from typing import Any

from src.sx_common.datetime_utils import iso_or_none
from src.sx_common.money import from_cents
from src.sx_common.response import CamelModel
from src.sx_product.application.schemas import BidOut, resolve_image_url
from src.sx_user_lists.domain.models import CartItem, HistoryOrder, ProductBrief, SellItem

# --- requests ---


class CartAddRequest(CamelModel):
    product_id: str


class HistoryRecordRequest(CamelModel):
    """Either a single {productId, priceAtPurchase} or {items: [...], clearCart}."""

    product_id: Any = None
    price_at_purchase: Any = None
    items: Any = None
    clear_cart: bool = False


class SellListRequest(CamelModel):
    product_id: str
    asking_price: Any = None


class SellPriceRequest(CamelModel):
    product_id: str
    asking_price: Any = None


# --- responses ---


class ProductBriefOut(CamelModel):
    id: str
    name: str
    price: float
    on_market: bool
    image_url: str | None

    @classmethod
    def from_domain(cls, brief: ProductBrief, api_prefix: str) -> "ProductBriefOut":
        return cls(
            id=brief.id,
            name=brief.name,
            price=from_cents(brief.price),
            on_market=brief.on_market,
            image_url=resolve_image_url(brief.id, brief.image, api_prefix),
        )


def _brief(brief: ProductBrief | None, api_prefix: str) -> ProductBriefOut | None:
    return ProductBriefOut.from_domain(brief, api_prefix) if brief else None


class CartItemOut(CamelModel):
    product_id: str
    added_at: str | None
    product: ProductBriefOut | None

    @classmethod
    def from_domain(cls, item: CartItem, api_prefix: str) -> "CartItemOut":
        return cls(
            product_id=item.product_id,
            added_at=iso_or_none(item.added_at),
            product=_brief(item.product, api_prefix),
        )


class HistoryOrderOut(CamelModel):
    id: str
    product_id: str
    price_at_purchase: float
    purchased_at: str | None
    product: ProductBriefOut | None

    @classmethod
    def from_domain(cls, order: HistoryOrder, api_prefix: str) -> "HistoryOrderOut":
        return cls(
            id=order.id,
            product_id=order.product_id,
            price_at_purchase=from_cents(order.price_at_purchase),
            purchased_at=iso_or_none(order.purchased_at),
            product=_brief(order.product, api_prefix),
        )


class SellItemOut(CamelModel):
    product_id: str
    asking_price: float | None
    listed_at: str | None
    product: ProductBriefOut | None

    @classmethod
    def from_domain(cls, item: SellItem, api_prefix: str) -> "SellItemOut":
        return cls(
            product_id=item.product_id,
            asking_price=from_cents(item.asking_price) if item.asking_price is not None else None,
            listed_at=iso_or_none(item.listed_at),
            product=_brief(item.product, api_prefix),
        )


class CartResponse(CamelModel):
    cart: list[CartItemOut]


class HistoryResponse(CamelModel):
    history_orders: list[HistoryOrderOut]
    cart: list[CartItemOut] | None = None


class HistoryStatsResponse(CamelModel):
    total_orders: int
    total_spent: float
    average_order_value: float


class OngoingBidsResponse(CamelModel):
    ongoing_bids: list[BidOut]


class SellListResponse(CamelModel):
    items_to_sell: list[SellItemOut]
