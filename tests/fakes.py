"""In-memory stand-ins for the repositories, used by service and API tests.

Reads hand out deep copies, so a service that fails half-way through a
mutation leaves the stored state untouched, the same as a rolled-back
transaction.
"""

import copy
from dataclasses import replace

from src.sx_common.datetime_utils import utc_now
from src.sx_common.enums import LIVE_BID_STATUSES
from src.sx_product.domain.models import Bid, ExternalImage, ImageRef, Product, StoredImage


class InMemoryProductRepository:
    def __init__(self) -> None:
        self.products: dict[str, Product] = {}
        self.bids: dict[str, Bid] = {}
        self.images: dict[str, bytes] = {}

    # --- helpers for tests ---

    def seed(self, product: Product) -> Product:
        stored = copy.deepcopy(product)
        stored.bids = []
        self.products[product.id] = stored
        for bid in product.bids:
            self.bids[bid.id] = copy.deepcopy(bid)
        return product

    def stored(self, product_id: str) -> Product:
        product = copy.deepcopy(self.products[product_id])
        product.bids = self._live(product_id)
        return product

    def _live(self, product_id: str) -> list[Bid]:
        live = [
            copy.deepcopy(b)
            for b in self.bids.values()
            if b.product_id == product_id and b.status in LIVE_BID_STATUSES
        ]
        live.sort(key=lambda b: (b.created_at, int(b.id)))
        return live

    # --- ProductRepositoryProtocol ---

    async def get_product(self, db, product_id, for_update=False):
        if product_id not in self.products:
            return None
        return self.stored(product_id)

    async def list_products(self, db, owner, cursor_id, limit):
        items = [
            p for p in self.products.values()
            if (owner is None or p.owner == owner)
            and (cursor_id is None or int(p.id) < int(cursor_id))
        ]
        items.sort(key=lambda p: int(p.id), reverse=True)
        return [self.stored(p.id) for p in items[:limit]]

    async def insert_product(self, db, product):
        stored = copy.deepcopy(product)
        if isinstance(product.image, StoredImage) and product.image.data is not None:
            self.images[product.id] = product.image.data
            stored.image = replace(product.image, data=None)
        stored.bids = []
        self.products[product.id] = stored

    async def update_product(self, db, product):
        stored = copy.deepcopy(product)
        stored.bids = []
        stored.version = self.products[product.id].version + 1
        stored.updated_at = utc_now()
        if isinstance(stored.image, ExternalImage):
            self.images.pop(product.id, None)
        self.products[product.id] = stored
        product.version = stored.version
        product.updated_at = stored.updated_at

    async def delete_product(self, db, product_id):
        doomed = [b.id for b in self.bids.values() if b.product_id == product_id]
        for bid_id in doomed:
            del self.bids[bid_id]
        self.products.pop(product_id, None)
        self.images.pop(product_id, None)
        return len(doomed)

    async def get_image(self, db, product_id) -> ImageRef | None:
        product = self.products.get(product_id)
        if product is None or product.image is None:
            return None
        if isinstance(product.image, StoredImage):
            return replace(product.image, data=self.images.get(product_id))
        return product.image

    async def list_live_bids(self, db, product_id):
        return self._live(product_id)

    async def get_bid(self, db, bid_id):
        bid = self.bids.get(bid_id)
        return copy.deepcopy(bid) if bid else None

    async def list_bids(self, db, product_id, user_id, statuses):
        found = [
            copy.deepcopy(b)
            for b in self.bids.values()
            if (product_id is None or b.product_id == product_id)
            and (user_id is None or b.user_id == user_id)
            and (not statuses or b.status in statuses)
        ]
        found.sort(key=lambda b: (b.created_at, int(b.id)), reverse=True)
        return found

    async def insert_bid(self, db, bid):
        self.bids[bid.id] = copy.deepcopy(bid)

    async def delete_bid(self, db, bid_id):
        self.bids.pop(bid_id, None)

    async def delete_bids_for_product(self, db, product_id):
        doomed = [b.id for b in self.bids.values() if b.product_id == product_id]
        for bid_id in doomed:
            del self.bids[bid_id]
        return len(doomed)

    async def update_bid_status(self, db, bid_id, status):
        self.bids[bid_id].status = status
        self.bids[bid_id].updated_at = utc_now()

    async def reject_pending_siblings(self, db, product_id, accepted_bid_id):
        count = 0
        for bid in self.bids.values():
            if bid.product_id == product_id and bid.id != accepted_bid_id and bid.status == "pending":
                bid.status = "rejected"
                count += 1
        return count
