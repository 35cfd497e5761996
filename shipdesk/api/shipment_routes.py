from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from shipdesk.auth.dependencies import get_owner_id
from shipdesk.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from shipdesk.core.exceptions import ValidationError
from shipdesk.crud import shipment as shipment_crud
from shipdesk.db import get_db
from shipdesk.models.shipment import CourierService, ShipmentStatus
from shipdesk.schemas.common import dump, dump_many
from shipdesk.schemas.shipment import BulkShipmentCreate, ShipmentCreate, ShipmentRead, ShipmentUpdate
from shipdesk.services import media
from shipdesk.services.shipping.bulk import create_bulk_shipments
from shipdesk.utils.pagination import page_bounds, page_info
from shipdesk.utils.storage import StorageBackend, get_storage

router = APIRouter(prefix="/api/shipments", tags=["shipments"])


# ---------- Fixed paths (before /{shipment_id}) ----------
@router.get("/courier-services")
async def courier_services(owner_id=Depends(get_owner_id)):
    return {
        "status": True,
        "message": "Courier services fetched successfully",
        "data": [c.value for c in CourierService],
    }


@router.post("/bulk", status_code=201)
async def bulk_create(
    data: BulkShipmentCreate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    shipments = await create_bulk_shipments(db, data, user_id=owner_id)
    return {
        "status": True,
        "message": f"{len(shipments)} shipments created successfully",
        "count": len(shipments),
        "data": dump_many(ShipmentRead, shipments),
    }


@router.get("/order/{order_id}")
async def order_shipments(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    shipments = await shipment_crud.list_shipments_for_order(db, order_id, user_id=owner_id)
    return {
        "status": True,
        "message": "Shipments fetched successfully",
        "count": len(shipments),
        "data": dump_many(ShipmentRead, shipments),
    }


# ---------- Collection ----------
@router.post("", status_code=201)
async def create_shipment(
    data: ShipmentCreate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    shipment = await shipment_crud.create_shipment(db, data, user_id=owner_id)
    return {"status": True, "message": "Shipment created successfully", "data": dump(ShipmentRead, shipment)}


@router.get("")
async def list_shipments(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    status: Optional[ShipmentStatus] = None,
    courierService: Optional[CourierService] = None,
    orderId: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    offset, limit = page_bounds(page, limit, MAX_PAGE_SIZE)
    shipments, total = await shipment_crud.list_shipments(
        db,
        user_id=owner_id,
        offset=offset,
        limit=limit,
        search=search,
        status=status,
        courier_service=courierService,
        order_id=orderId,
    )
    return {
        "status": True,
        "message": "Shipments fetched successfully",
        "data": dump_many(ShipmentRead, shipments),
        "pagination": page_info(page, limit, total),
    }


# ---------- Single shipment ----------
@router.get("/{shipment_id}")
async def get_shipment(
    shipment_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    shipment = await shipment_crud.get_shipment(db, shipment_id, user_id=owner_id)
    return {"status": True, "message": "Shipment fetched successfully", "data": dump(ShipmentRead, shipment)}


@router.put("/{shipment_id}")
async def update_shipment(
    shipment_id: str,
    data: ShipmentUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    shipment = await shipment_crud.update_shipment(db, shipment_id, data, user_id=owner_id)
    return {"status": True, "message": "Shipment updated successfully", "data": dump(ShipmentRead, shipment)}


@router.put("/{order_id}/{shipment_id}")
async def update_order_shipment(
    order_id: str,
    shipment_id: str,
    data: ShipmentUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    shipment = await shipment_crud.update_shipment(db, shipment_id, data, user_id=owner_id, order_id=order_id)
    return {"status": True, "message": "Shipment updated successfully", "data": dump(ShipmentRead, shipment)}


@router.post("/{shipment_id}/media")
async def add_shipment_media(
    shipment_id: str,
    images: Optional[List[UploadFile]] = File(None),
    videos: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
    storage: StorageBackend = Depends(get_storage),
):
    if not images and not videos:
        raise ValidationError("No files were uploaded.")
    # ownership first so nothing is stored for someone else's shipment
    await shipment_crud.get_shipment(db, shipment_id, user_id=owner_id)
    stored = await media.store_media(storage, images=images, videos=videos, shipment=True)
    shipment = await shipment_crud.add_shipment_media(
        db,
        shipment_id,
        user_id=owner_id,
        images=[f["path"] for f in stored["images"]],
        videos=[f["path"] for f in stored["videos"]],
    )
    return {"status": True, "message": "Media added successfully", "data": dump(ShipmentRead, shipment)}


@router.delete("/{shipment_id}")
async def delete_shipment(
    shipment_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    await shipment_crud.delete_shipment(db, shipment_id, user_id=owner_id)
    return {"status": True, "message": "Shipment deleted successfully"}
