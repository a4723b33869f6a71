"""Domain models for sx_product — pure dataclasses, no SQLAlchemy dependency.

All money fields are int cents.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.sx_common.enums import LIVE_BID_STATUSES


@dataclass(frozen=True)
class StoredImage:
    """Image blob kept in product_images. data is only loaded when serving it."""

    content_type: str
    size: int
    filename: str | None = None
    data: bytes | None = None


@dataclass(frozen=True)
class ExternalImage:
    url: str


ImageRef = StoredImage | ExternalImage


@dataclass
class Bid:
    id: str
    product_id: str
    user_id: str | None  # None for entries written by a bulk replace
    amount: int
    status: str = "pending"
    message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_BID_STATUSES


@dataclass
class Product:
    id: str
    name: str
    description: str
    owner: str
    price: int
    image: ImageRef | None = None
    demand_value: int = 0
    dao_id: str | None = None
    on_market: bool = False
    personal_item: bool = False
    years_of_use: int | None = None
    authenticity_certificate: str | None = None
    is_market_item: bool = False
    initial_bid: int | None = None
    demand_price: int | None = None
    is_rentable: bool = False
    # Live bids (pending/accepted) in chronological order
    bids: list[Bid] = field(default_factory=list)
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def bid_amounts(self) -> list[int]:
        return [b.amount for b in self.bids]
