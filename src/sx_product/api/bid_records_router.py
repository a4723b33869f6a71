"""Bid records with bidder identity and status.

GET /bids?productId=&userId=&status=   — newest first
POST /bids {productId, amount, message?}
PUT /bids/{bid_id} {status}            — accept / reject (product owner)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import get_db_session
from src.sx_common.response import ApiResponse, respond
from src.sx_gateway.auth.dependencies import get_current_user
from src.sx_gateway.user.db_models import UserModel
from src.sx_product.api.dependencies import get_bid_record_service
from src.sx_product.application.bid_service import BidRecordService
from src.sx_product.application.schemas import PlaceBidRequest, UpdateBidStatusRequest

router = APIRouter(prefix="/bids", tags=["bids"])

Service = Annotated[BidRecordService, Depends(get_bid_record_service)]
Session = Annotated[AsyncSession, Depends(get_db_session)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]


@router.get("")
async def list_bids(
    request: Request,
    db: Session,
    service: Service,
    product_id: str | None = Query(None, alias="productId"),
    user_id: str | None = Query(None, alias="userId"),
    bid_status: str | None = Query(None, alias="status"),
) -> ApiResponse:
    bids = await service.list_bids(db, product_id, user_id, bid_status)
    return respond(request, [b.to_wire() for b in bids])


@router.post("")
async def place_bid(
    request: Request,
    body: PlaceBidRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    bid = await service.place_bid(
        db, body.product_id, str(current_user.id), body.amount, body.message
    )
    return respond(request, bid, "Bid placed successfully")


@router.put("/{bid_id}")
async def update_bid_status(
    bid_id: str,
    request: Request,
    body: UpdateBidStatusRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.set_status(db, bid_id, str(current_user.id), body.status)
    return respond(request, result, f"Bid {result.bid.status}")
