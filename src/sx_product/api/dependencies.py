"""Service wiring for the product routers.

One lifecycle service per process, built from Settings. Routers take the
services through Depends so tests can swap in a service over a fake
repository via app.dependency_overrides.
"""

import logging

from config.settings import settings
from src.sx_product.application.bid_service import BidRecordService
from src.sx_product.application.service import ProductLifecycleService

_lifecycle = ProductLifecycleService(
    logger=logging.getLogger("stakex.product"),
    allow_demand_value_override=settings.ALLOW_DEMAND_VALUE_OVERRIDE,
    max_image_bytes=settings.MAX_IMAGE_BYTES,
    api_prefix=settings.API_PREFIX,
)
_bid_records = BidRecordService(_lifecycle)


def get_lifecycle_service() -> ProductLifecycleService:
    return _lifecycle


def get_bid_record_service() -> BidRecordService:
    return _bid_records
