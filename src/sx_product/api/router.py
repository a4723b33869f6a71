"""Product endpoints.

POST   /posts                 — create (multipart: fields + optional image file)
GET    /posts                 — list, newest first, cursor pagination
GET    /posts/{product_id}    — detail
GET    /posts/{product_id}/image — stored blob, or 307 to the external URL
PUT    /posts/{product_id}    — partial update (owner only, JSON)
DELETE /posts/{product_id}    — delete with its bids (owner only)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import get_db_session
from src.sx_common.response import ApiResponse, respond
from src.sx_gateway.auth.dependencies import get_current_user
from src.sx_gateway.user.db_models import UserModel
from src.sx_product.api.dependencies import get_lifecycle_service
from src.sx_product.application.schemas import ProductCreateRequest, ProductUpdateRequest
from src.sx_product.application.service import ImageUpload, ProductLifecycleService
from src.sx_product.domain.models import StoredImage

router = APIRouter(prefix="/posts", tags=["posts"])

Service = Annotated[ProductLifecycleService, Depends(get_lifecycle_service)]
Session = Annotated[AsyncSession, Depends(get_db_session)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]


@router.post("")
async def create_product(
    request: Request,
    current_user: CurrentUser,
    db: Session,
    service: Service,
    name: Annotated[str, Form()],
    description: Annotated[str, Form()],
    price: Annotated[float, Form()],
    image_url: Annotated[str | None, Form(alias="imageUrl")] = None,
    dao_id: Annotated[str | None, Form(alias="daoId")] = None,
    on_market: Annotated[bool, Form(alias="onMarket")] = False,
    personal_item: Annotated[bool, Form(alias="personalItem")] = False,
    years_of_use: Annotated[int | None, Form(alias="yearsOfUse")] = None,
    authenticity_certificate: Annotated[
        str | None, Form(alias="authenticityCertificate")
    ] = None,
    is_market_item: Annotated[bool, Form(alias="isMarketItem")] = False,
    initial_bid: Annotated[float | None, Form(alias="initialBid")] = None,
    demand_price: Annotated[float | None, Form(alias="demandPrice")] = None,
    is_rentable: Annotated[bool, Form(alias="isRentable")] = False,
    image: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    req = ProductCreateRequest(
        name=name,
        description=description,
        price=price,
        image_url=image_url or None,
        dao_id=dao_id or None,
        on_market=on_market,
        personal_item=personal_item,
        years_of_use=years_of_use,
        authenticity_certificate=authenticity_certificate or None,
        is_market_item=is_market_item,
        initial_bid=initial_bid,
        demand_price=demand_price,
        is_rentable=is_rentable,
    )
    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(
            data=await image.read(),
            content_type=image.content_type or "application/octet-stream",
            filename=image.filename,
        )
    product = await service.create_product(db, str(current_user.id), req, upload)
    return respond(request, product, "Product created successfully")


@router.get("")
async def list_products(
    request: Request,
    db: Session,
    service: Service,
    owner: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await service.list_products(db, owner, cursor, limit)
    return respond(request, result)


@router.get("/{product_id}")
async def get_product(
    product_id: str, request: Request, db: Session, service: Service
) -> ApiResponse:
    return respond(request, await service.get_product(db, product_id))


@router.get("/{product_id}/image", response_model=None)
async def get_product_image(
    product_id: str, db: Session, service: Service
) -> Response:
    image = await service.get_image(db, product_id)
    if isinstance(image, StoredImage):
        return Response(
            content=image.data,
            media_type=image.content_type,
            headers={"Cache-Control": "public, max-age=3600"},
        )
    return RedirectResponse(image.url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    request: Request,
    body: ProductUpdateRequest,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    product = await service.update_product(db, product_id, str(current_user.id), body)
    return respond(request, product, "Product updated successfully")


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    request: Request,
    current_user: CurrentUser,
    db: Session,
    service: Service,
) -> ApiResponse:
    result = await service.delete_product(db, product_id, str(current_user.id))
    return respond(request, result, "Product deleted successfully")
