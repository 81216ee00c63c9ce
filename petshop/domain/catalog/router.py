"""Catalog router - FastAPI endpoints for services"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_staff, get_current_user
from ...database import get_db
from ...models import Service
from .schemas import ServiceCreate, ServiceResponse, ServiceUpdate
from .service import CatalogService

router = APIRouter(prefix="/services", tags=["Services"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


def to_service_response(service: Service) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        name=service.name,
        duration=service.duration,
        price=float(service.price),
        description=service.description,
        created_at=service.created_at,
    )


@router.get("", response_model=list[ServiceResponse])
async def get_services(
    current_user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    """List services ordered by name"""
    return [to_service_response(s) for s in service.get_services()]


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: CatalogService = Depends(get_catalog_service),
):
    return to_service_response(service.create_service(data))


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return to_service_response(service.get_service(service_id))


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: CatalogService = Depends(get_catalog_service),
):
    return to_service_response(service.update_service(service_id, data))


@router.delete("/{service_id}")
async def delete_service(
    service_id: str,
    current_user: CurrentUser = Depends(get_current_staff),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.delete_service(service_id)
