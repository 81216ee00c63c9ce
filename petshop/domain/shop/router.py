"""Shop router - FastAPI endpoints for the shop profile"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_admin, get_current_user
from ...database import get_db
from ...models import PetShop
from .schemas import ShopResponse, ShopUpdate
from .service import ShopService

router = APIRouter(prefix="/shop", tags=["Shop"])


def get_shop_service(db: Session = Depends(get_db)) -> ShopService:
    """Dependency injection for ShopService"""
    return ShopService(db)


def to_shop_response(shop: PetShop) -> ShopResponse:
    return ShopResponse(
        id=shop.id,
        name=shop.name,
        workingHours=shop.working_hours or {},
        updated_at=shop.updated_at,
    )


@router.get("", response_model=ShopResponse)
async def get_shop(
    current_user: CurrentUser = Depends(get_current_user),
    service: ShopService = Depends(get_shop_service),
):
    """Shop name and weekly opening hours"""
    return to_shop_response(service.get_shop())


@router.put("", response_model=ShopResponse)
async def save_shop(
    data: ShopUpdate,
    current_user: CurrentUser = Depends(get_current_admin),
    service: ShopService = Depends(get_shop_service),
):
    """Create or replace the shop profile and weekly schedule"""
    return to_shop_response(service.save_shop(data))
