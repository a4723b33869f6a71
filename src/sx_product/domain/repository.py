# src/sx_product/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or the in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_product.domain.models import Bid, ImageRef, Product


class ProductRepositoryProtocol(Protocol):
    async def get_product(
        self,
        db: AsyncSession,
        product_id: str,
        for_update: bool = False,
    ) -> Product | None: ...

    async def list_products(
        self,
        db: AsyncSession,
        owner: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Product]: ...

    async def insert_product(self, db: AsyncSession, product: Product) -> None: ...

    async def update_product(self, db: AsyncSession, product: Product) -> None: ...

    async def delete_product(self, db: AsyncSession, product_id: str) -> int: ...

    async def get_image(self, db: AsyncSession, product_id: str) -> ImageRef | None: ...

    async def list_live_bids(self, db: AsyncSession, product_id: str) -> list[Bid]: ...

    async def get_bid(self, db: AsyncSession, bid_id: str) -> Bid | None: ...

    async def list_bids(
        self,
        db: AsyncSession,
        product_id: str | None,
        user_id: str | None,
        statuses: list[str] | None,
    ) -> list[Bid]: ...

    async def insert_bid(self, db: AsyncSession, bid: Bid) -> None: ...

    async def delete_bid(self, db: AsyncSession, bid_id: str) -> None: ...

    async def delete_bids_for_product(self, db: AsyncSession, product_id: str) -> int: ...

    async def update_bid_status(self, db: AsyncSession, bid_id: str, status: str) -> None: ...

    async def reject_pending_siblings(
        self, db: AsyncSession, product_id: str, accepted_bid_id: str
    ) -> int: ...
