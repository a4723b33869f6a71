"""ProductLifecycleService — every mutation that can move a demand value.

Write operations follow one shape:
  1. validate the request (ids, amounts) before touching storage
  2. lock the product row (SELECT ... FOR UPDATE) inside one transaction
  3. check ownership
  4. mutate price / initial bid / bids
  5. recompute demand_value from the stored inputs and persist with version+1

The row lock serializes concurrent writers of a product, so two bids placed at
the same moment cannot both compute from the same prior bid list.

Reads run without an explicit transaction.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import transactional
from src.sx_common.datetime_utils import utc_now
from src.sx_common.enums import BidStatus
from src.sx_common.errors import (
    BidIndexOutOfRangeError,
    DemandValueOverrideDisabledError,
    ImageNotFoundError,
    InvalidBidAmountError,
    InvalidBidIndexError,
    InvalidBidListError,
    InvalidIdError,
    InvalidImageError,
    InvalidProductError,
    ProductNotFoundError,
)
from src.sx_common.id_generator import generate_id, is_valid_id
from src.sx_common.money import from_cents, is_number, to_cents
from src.sx_product.application.schemas import (
    AddBidResponse,
    BidSummaryResponse,
    DeleteProductResponse,
    ProductCreateRequest,
    ProductListResponse,
    ProductOut,
    ProductUpdateRequest,
    RemoveBidResponse,
)
from src.sx_product.domain.access import ensure_can_bid, ensure_owner
from src.sx_product.domain.demand import demand_value_for
from src.sx_product.domain.models import Bid, ExternalImage, ImageRef, Product, StoredImage
from src.sx_product.domain.repository import ProductRepositoryProtocol
from src.sx_product.infrastructure.persistence import ProductRepository

_DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024

# Update fields that feed the demand value formula
_DEMAND_INPUTS = frozenset({"price", "initial_bid", "is_market_item"})
_MONEY_FIELDS = frozenset({"price", "initial_bid", "demand_price"})
_NON_NULLABLE = frozenset(
    {"name", "description", "price", "on_market", "is_market_item", "is_rentable"}
)


@dataclass(frozen=True)
class ImageUpload:
    data: bytes
    content_type: str
    filename: str | None = None


def check_id(value: str, kind: str = "product") -> str:
    if not is_valid_id(value):
        raise InvalidIdError(kind, value)
    return value


def parse_bid_amount(amount: Any) -> int:
    """A bid must be a JSON number worth at least one cent."""
    if not is_number(amount) or amount <= 0:
        raise InvalidBidAmountError()
    try:
        cents = to_cents(amount)
    except ValueError:
        raise InvalidBidAmountError() from None
    if cents <= 0:
        raise InvalidBidAmountError()
    return cents


def filter_bid_amounts(values: list[Any]) -> list[int]:
    """Bulk replace is lenient: anything that is not a positive number is dropped."""
    kept: list[int] = []
    for value in values:
        if not is_number(value) or value <= 0:
            continue
        try:
            cents = to_cents(value)
        except ValueError:
            continue
        if cents > 0:
            kept.append(cents)
    return kept


def _money_field(name: str, value: Any, *, allow_zero: bool = False) -> int:
    if not is_number(value):
        raise InvalidProductError(f"{name} must be a valid number")
    try:
        cents = to_cents(value)
    except ValueError:
        raise InvalidProductError(f"{name} must be a valid number") from None
    if cents < 0 or (cents == 0 and not allow_zero):
        raise InvalidProductError(f"{name} must be greater than 0")
    return cents


def _validate_pricing(product: Product) -> None:
    if product.price <= 0:
        raise InvalidProductError("price must be greater than 0")
    if product.is_market_item:
        if product.initial_bid is None:
            raise InvalidProductError("initialBid is required for market items")
        if product.initial_bid <= 0:
            raise InvalidProductError("initialBid must be greater than 0")
        if product.initial_bid >= product.price:
            raise InvalidProductError("initialBid must be less than price")


def _validate_external_url(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        raise InvalidImageError("Image URL must be an absolute http(s) URL")
    return url


class ProductLifecycleService:
    def __init__(
        self,
        repo: ProductRepositoryProtocol | None = None,
        logger: logging.Logger | None = None,
        allow_demand_value_override: bool = True,
        max_image_bytes: int = _DEFAULT_MAX_IMAGE_BYTES,
        api_prefix: str = "/api",
    ) -> None:
        self._repo: ProductRepositoryProtocol = repo or ProductRepository()
        self._log = logger or logging.getLogger("stakex.product")
        self._allow_override = allow_demand_value_override
        self._max_image_bytes = max_image_bytes
        self._api_prefix = api_prefix

    @property
    def repo(self) -> ProductRepositoryProtocol:
        return self._repo

    # ------------------------------------------------------------------
    # Shared building blocks (also used by BidRecordService)
    # ------------------------------------------------------------------

    async def lock_product(self, db: AsyncSession, product_id: str) -> Product:
        product = await self._repo.get_product(db, product_id, for_update=True)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def save_with_demand_value(self, db: AsyncSession, product: Product) -> None:
        product.demand_value = demand_value_for(product)
        await self._repo.update_product(db, product)

    def to_out(self, product: Product) -> ProductOut:
        return ProductOut.from_domain(product, self._api_prefix)

    # ------------------------------------------------------------------
    # Product CRUD
    # ------------------------------------------------------------------

    async def create_product(
        self,
        db: AsyncSession,
        owner_id: str,
        req: ProductCreateRequest,
        upload: ImageUpload | None = None,
    ) -> ProductOut:
        name = req.name.strip()
        description = req.description.strip()
        if not name:
            raise InvalidProductError("name is required")
        if not description:
            raise InvalidProductError("description is required")

        now = utc_now()
        product = Product(
            id=generate_id(),
            name=name,
            description=description,
            owner=owner_id,
            price=_money_field("price", req.price),
            image=self._image_from_request(upload, req.image_url),
            dao_id=req.dao_id,
            on_market=req.on_market,
            personal_item=req.personal_item,
            years_of_use=req.years_of_use,
            authenticity_certificate=req.authenticity_certificate,
            is_market_item=req.is_market_item,
            initial_bid=(
                _money_field("initialBid", req.initial_bid)
                if req.initial_bid is not None
                else None
            ),
            demand_price=(
                _money_field("demandPrice", req.demand_price, allow_zero=True)
                if req.demand_price is not None
                else None
            ),
            is_rentable=req.is_rentable,
            created_at=now,
            updated_at=now,
        )
        if product.years_of_use is not None and product.years_of_use < 0:
            raise InvalidProductError("yearsOfUse must not be negative")
        _validate_pricing(product)
        product.demand_value = demand_value_for(product)

        async with transactional(db):
            await self._repo.insert_product(db, product)

        self._log.info(
            "product created id=%s owner=%s price=%d demand_value=%d",
            product.id, owner_id, product.price, product.demand_value,
        )
        return self.to_out(product)

    async def get_product(self, db: AsyncSession, product_id: str) -> ProductOut:
        check_id(product_id)
        product = await self._repo.get_product(db, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return self.to_out(product)

    async def list_products(
        self,
        db: AsyncSession,
        owner: str | None,
        cursor: str | None,
        limit: int,
    ) -> ProductListResponse:
        cursor_id = cursor if cursor and is_valid_id(cursor) else None
        # Fetch limit+1 to detect has_more without COUNT(*)
        products = await self._repo.list_products(db, owner, cursor_id, limit + 1)
        has_more = len(products) > limit
        page = products[:limit]
        return ProductListResponse(
            items=[self.to_out(p) for p in page],
            next_cursor=page[-1].id if has_more and page else None,
            has_more=has_more,
        )

    async def get_image(self, db: AsyncSession, product_id: str) -> ImageRef:
        check_id(product_id)
        image = await self._repo.get_image(db, product_id)
        if image is None:
            raise ImageNotFoundError(product_id)
        if isinstance(image, StoredImage) and image.data is None:
            raise ImageNotFoundError(product_id)
        return image

    async def update_product(
        self,
        db: AsyncSession,
        product_id: str,
        actor_id: str,
        req: ProductUpdateRequest,
    ) -> ProductOut:
        """Apply an allow-listed partial update.

        If price, initialBid or isMarketItem change, demand_value is recomputed
        from the merged state. An explicit demandValue in the same request wins
        over recomputation (admin override); it is refused when the service was
        built with allow_demand_value_override=False.
        """
        check_id(product_id)
        changes = req.model_dump(exclude_unset=True)
        has_override = "demand_value" in changes
        override = changes.pop("demand_value", None)
        if has_override and not self._allow_override:
            raise DemandValueOverrideDisabledError()

        async with transactional(db):
            product = await self.lock_product(db, product_id)
            ensure_owner(product, actor_id, "edit this product")

            for field_name, value in changes.items():
                self._apply_change(product, field_name, value)
            _validate_pricing(product)

            if has_override:
                product.demand_value = _money_field("demandValue", override, allow_zero=True)
                self._log.warning(
                    "demand value overridden id=%s actor=%s demand_value=%d computed=%d",
                    product.id, actor_id, product.demand_value, demand_value_for(product),
                )
            elif _DEMAND_INPUTS & changes.keys():
                product.demand_value = demand_value_for(product)
            await self._repo.update_product(db, product)

        self._log.info(
            "product updated id=%s actor=%s fields=%s demand_value=%d",
            product.id, actor_id, sorted(changes), product.demand_value,
        )
        return self.to_out(product)

    async def delete_product(
        self, db: AsyncSession, product_id: str, actor_id: str
    ) -> DeleteProductResponse:
        check_id(product_id)
        async with transactional(db):
            product = await self.lock_product(db, product_id)
            ensure_owner(product, actor_id, "delete this product")
            deleted_bids = await self._repo.delete_product(db, product_id)

        self._log.info(
            "product deleted id=%s actor=%s bids_removed=%d", product_id, actor_id, deleted_bids
        )
        return DeleteProductResponse(product_id=product_id, deleted_bids=deleted_bids)

    # ------------------------------------------------------------------
    # Bids on a product
    # ------------------------------------------------------------------

    async def get_bid_summary(self, db: AsyncSession, product_id: str) -> BidSummaryResponse:
        check_id(product_id)
        product = await self._repo.get_product(db, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return BidSummaryResponse.from_domain(product)

    async def add_bid(
        self,
        db: AsyncSession,
        product_id: str,
        actor_id: str,
        amount: Any,
        message: str | None = None,
    ) -> tuple[Product, Bid]:
        check_id(product_id)
        cents = parse_bid_amount(amount)

        async with transactional(db):
            product = await self.lock_product(db, product_id)
            ensure_can_bid(product, actor_id)
            now = utc_now()
            bid = Bid(
                id=generate_id(),
                product_id=product.id,
                user_id=actor_id,
                amount=cents,
                status=BidStatus.PENDING.value,
                message=message,
                created_at=now,
                updated_at=now,
            )
            await self._repo.insert_bid(db, bid)
            product.bids.append(bid)
            await self.save_with_demand_value(db, product)

        self._log.info(
            "bid added product=%s bidder=%s amount=%d bids=%d demand_value=%d",
            product.id, actor_id, cents, len(product.bids), product.demand_value,
        )
        return product, bid

    async def place_bid(
        self, db: AsyncSession, product_id: str, actor_id: str, amount: Any
    ) -> AddBidResponse:
        product, bid = await self.add_bid(db, product_id, actor_id, amount)
        return AddBidResponse.from_domain(product, bid)

    async def remove_bid(
        self, db: AsyncSession, product_id: str, actor_id: str, index: int
    ) -> RemoveBidResponse:
        check_id(product_id)
        if index < 0:
            raise InvalidBidIndexError()

        async with transactional(db):
            product = await self.lock_product(db, product_id)
            ensure_owner(product, actor_id, "remove bids")
            if index >= len(product.bids):
                raise BidIndexOutOfRangeError(index, len(product.bids))
            removed = product.bids.pop(index)
            await self._repo.delete_bid(db, removed.id)
            await self.save_with_demand_value(db, product)

        self._log.info(
            "bid removed product=%s actor=%s index=%d amount=%d demand_value=%d",
            product.id, actor_id, index, removed.amount, product.demand_value,
        )
        summary = BidSummaryResponse.from_domain(product)
        return RemoveBidResponse(**summary.model_dump(), removed_bid=from_cents(removed.amount))

    async def replace_bids(
        self, db: AsyncSession, product_id: str, actor_id: str, bids: Any
    ) -> BidSummaryResponse:
        check_id(product_id)
        if not isinstance(bids, list):
            raise InvalidBidListError()
        amounts = filter_bid_amounts(bids)

        async with transactional(db):
            product = await self.lock_product(db, product_id)
            ensure_owner(product, actor_id, "update bids")
            await self._repo.delete_bids_for_product(db, product.id)
            now = utc_now()
            replacement = [
                Bid(
                    id=generate_id(),
                    product_id=product.id,
                    user_id=None,
                    amount=cents,
                    status=BidStatus.PENDING.value,
                    created_at=now,
                    updated_at=now,
                )
                for cents in amounts
            ]
            for bid in replacement:
                await self._repo.insert_bid(db, bid)
            product.bids = replacement
            await self.save_with_demand_value(db, product)

        dropped = len(bids) - len(amounts)
        self._log.info(
            "bids replaced product=%s actor=%s kept=%d dropped=%d demand_value=%d",
            product.id, actor_id, len(amounts), dropped, product.demand_value,
        )
        return BidSummaryResponse.from_domain(product)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _image_from_request(
        self, upload: ImageUpload | None, image_url: str | None
    ) -> ImageRef:
        if upload is not None:
            if not upload.content_type.startswith("image/"):
                raise InvalidImageError(f"Unsupported image type: {upload.content_type}")
            if not upload.data:
                raise InvalidImageError("Image file is empty")
            if len(upload.data) > self._max_image_bytes:
                raise InvalidImageError(
                    f"Image exceeds {self._max_image_bytes} bytes"
                )
            return StoredImage(
                content_type=upload.content_type,
                size=len(upload.data),
                filename=upload.filename,
                data=upload.data,
            )
        if image_url:
            return ExternalImage(url=_validate_external_url(image_url))
        raise InvalidImageError("An image file or imageUrl is required")

    def _apply_change(self, product: Product, field_name: str, value: Any) -> None:
        wire_name = to_camel(field_name)
        if value is None and field_name in _NON_NULLABLE:
            raise InvalidProductError(f"{wire_name} cannot be null")

        if field_name == "image":
            if not value:
                raise InvalidImageError("image cannot be empty")
            product.image = ExternalImage(url=_validate_external_url(value))
        elif field_name in ("name", "description"):
            if not value.strip():
                raise InvalidProductError(f"{wire_name} is required")
            setattr(product, field_name, value.strip())
        elif field_name in _MONEY_FIELDS:
            setattr(
                product,
                field_name,
                None if value is None else _money_field(
                    wire_name, value, allow_zero=field_name == "demand_price"
                ),
            )
        elif field_name == "years_of_use":
            if value is not None and value < 0:
                raise InvalidProductError("yearsOfUse must not be negative")
            product.years_of_use = value
        else:
            setattr(product, field_name, value)
