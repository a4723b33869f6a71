"""Bids attached to a product, addressed by position in the live list.

GET    /product-bids/{product_id}           — bid summary (public)
POST   /product-bids/{product_id}           — add a bid {amount}
PUT    /product-bids/{product_id}           — replace all bids {bids: [...]} (owner)
DELETE /product-bids/{product_id}/{index}   — remove the bid at index (owner)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import get_db_session
from src.sx_common.errors import InvalidBidIndexError
from src.sx_common.response import ApiResponse, respond
from src.sx_gateway.auth.dependencies import get_current_user
from src.sx_gateway.user.db_models import UserModel
from src.sx_product.api.dependencies import get_lifecycle_service
from src.sx_product.application.schemas import AddBidRequest, ReplaceBidsRequest
from src.sx_product.application.service import ProductLifecycleService

router = APIRouter(prefix="/product-bids", tags=["product-bids"])

Service = Annotated[ProductLifecycleService, Depends(get_lifecycle_service)]
Session = Annotated[AsyncSession, Depends(get_db_session)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]


def _parse_index(raw: str) -> int:
    # int("1.5") and int("abc") both fail; "-1" parses and is rejected later
    try:
        return int(raw)
    except ValueError:
        raise InvalidBidIndexError() from None


@router.get("/{product_id}")
async def get_bids(
    product_id: str, request: Request, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.get_bid_summary(db, product_id))


@router.post("/{product_id}")
async def add_bid(
    product_id: str,
    request: Request,
    body: AddBidRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.place_bid(db, product_id, str(current_user.id), body.amount)
    return respond(request, result, "Bid added successfully")


@router.put("/{product_id}")
async def replace_bids(
    product_id: str,
    request: Request,
    body: ReplaceBidsRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.replace_bids(db, product_id, str(current_user.id), body.bids)
    return respond(request, result, "Bids updated successfully")


@router.delete("/{product_id}/{index}")
async def remove_bid(
    product_id: str,
    index: str,
    request: Request,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.remove_bid(
        db, product_id, str(current_user.id), _parse_index(index)
    )
    return respond(request, result, "Bid removed successfully")
