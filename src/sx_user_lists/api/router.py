"""Caller-scoped lists under /user (auth required on every route).

GET    /user/cart                 POST /user/cart {productId}
DELETE /user/cart/{productId}     DELETE /user/cart
GET    /user/history              POST /user/history {productId, priceAtPurchase} | {items, clearCart}
DELETE /user/history/{productId}  GET  /user/history/stats
GET    /user/bids
GET    /user/sell                 POST /user/sell {productId, askingPrice?}
PATCH  /user/sell {productId, askingPrice}
DELETE /user/sell/{productId}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sx_common.database import get_db_session
from src.sx_common.response import ApiResponse, respond
from src.sx_gateway.auth.dependencies import get_current_user
from src.sx_gateway.user.db_models import UserModel
from src.sx_user_lists.application.schemas import (
    CartAddRequest,
    HistoryRecordRequest,
    SellListRequest,
    SellPriceRequest,
)
from src.sx_user_lists.application.service import UserListsService

router = APIRouter(prefix="/user", tags=["user-lists"])

_service = UserListsService(api_prefix=settings.API_PREFIX)


def get_user_lists_service() -> UserListsService:
    return _service


Service = Annotated[UserListsService, Depends(get_user_lists_service)]
Session = Annotated[AsyncSession, Depends(get_db_session)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]


# --- cart ---


@router.get("/cart")
async def get_cart(
    request: Request, current_user: CurrentUser, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.get_cart(db, str(current_user.id)))


@router.post("/cart")
async def add_to_cart(
    request: Request,
    body: CartAddRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.add_to_cart(db, str(current_user.id), body.product_id)
    return respond(request, result, "Item added to cart")


@router.delete("/cart/{product_id}")
async def remove_from_cart(
    product_id: str,
    request: Request,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.remove_from_cart(db, str(current_user.id), product_id)
    return respond(request, result, "Item removed from cart")


@router.delete("/cart")
async def clear_cart(
    request: Request, current_user: CurrentUser, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.clear_cart(db, str(current_user.id)), "Cart cleared")


# --- history ---


@router.get("/history")
async def get_history(
    request: Request, current_user: CurrentUser, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.get_history(db, str(current_user.id)))


@router.get("/history/stats")
async def history_stats(
    request: Request, current_user: CurrentUser, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.history_stats(db, str(current_user.id)))


@router.post("/history")
async def record_purchases(
    request: Request,
    body: HistoryRecordRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.record_purchases(db, str(current_user.id), body)
    return respond(request, result, "Orders recorded")


@router.delete("/history/{product_id}")
async def remove_history(
    product_id: str,
    request: Request,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.remove_history(db, str(current_user.id), product_id)
    return respond(request, result, "Order removed from history")


# --- ongoing bids ---


@router.get("/bids")
async def ongoing_bids(
    request: Request, current_user: CurrentUser, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.ongoing_bids(db, str(current_user.id)))


# --- sell list ---


@router.get("/sell")
async def get_sell_list(
    request: Request, current_user: CurrentUser, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.get_sell_list(db, str(current_user.id)))


@router.post("/sell")
async def list_for_sale(
    request: Request,
    body: SellListRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.list_for_sale(
        db, str(current_user.id), body.product_id, body.asking_price
    )
    return respond(request, result, "Item listed for sale")


@router.patch("/sell")
async def update_asking_price(
    request: Request,
    body: SellPriceRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.update_asking_price(
        db, str(current_user.id), body.product_id, body.asking_price
    )
    return respond(request, result, "Asking price updated")


@router.delete("/sell/{product_id}")
async def unlist(
    product_id: str,
    request: Request,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.unlist(db, str(current_user.id), product_id)
    return respond(request, result, "Item unlisted")
