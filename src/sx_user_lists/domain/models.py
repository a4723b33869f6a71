"""Per-user lists kept next to the marketplace: cart, purchase history, sell list.

Amounts are int cents like everywhere else in the domain. Each entry carries
a ProductBrief when the product still exists (history outlives products).
"""

from dataclasses import dataclass
from datetime import datetime

from src.sx_product.domain.models import ImageRef


@dataclass(frozen=True)
class ProductBrief:
    id: str
    name: str
    price: int
    on_market: bool
    image: ImageRef | None = None


@dataclass
class CartItem:
    user_id: str
    product_id: str
    added_at: datetime | None = None
    product: ProductBrief | None = None


@dataclass
class HistoryOrder:
    id: str
    user_id: str
    product_id: str
    price_at_purchase: int
    purchased_at: datetime | None = None
    product: ProductBrief | None = None


@dataclass
class SellItem:
    user_id: str
    product_id: str
    asking_price: int | None = None
    listed_at: datetime | None = None
    product: ProductBrief | None = None
