"""UserListsRepository Protocol — interface contract for the list tables."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_user_lists.domain.models import CartItem, HistoryOrder, SellItem


class UserListsRepositoryProtocol(Protocol):
    # cart
    async def list_cart(self, db: AsyncSession, user_id: str) -> list[CartItem]: ...

    async def add_cart_item(self, db: AsyncSession, user_id: str, product_id: str) -> bool: ...

    async def remove_cart_item(
        self, db: AsyncSession, user_id: str, product_id: str
    ) -> int: ...

    async def clear_cart(self, db: AsyncSession, user_id: str) -> int: ...

    # history
    async def list_history(self, db: AsyncSession, user_id: str) -> list[HistoryOrder]: ...

    async def insert_history(self, db: AsyncSession, orders: list[HistoryOrder]) -> None: ...

    async def delete_history_for_product(
        self, db: AsyncSession, user_id: str, product_id: str
    ) -> int: ...

    async def history_totals(self, db: AsyncSession, user_id: str) -> tuple[int, int]: ...

    # sell list
    async def list_sell(self, db: AsyncSession, user_id: str) -> list[SellItem]: ...

    async def upsert_sell_item(
        self, db: AsyncSession, user_id: str, product_id: str, asking_price: int | None
    ) -> None: ...

    async def update_sell_price(
        self, db: AsyncSession, user_id: str, product_id: str, asking_price: int
    ) -> int: ...

    async def remove_sell_item(
        self, db: AsyncSession, user_id: str, product_id: str
    ) -> int: ...
