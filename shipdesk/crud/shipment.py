import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shipdesk.core.exceptions import ConflictError, NotFoundError
from shipdesk.crud.customer import find_customer_address
from shipdesk.models.customer import Customer, CustomerAddress
from shipdesk.models.order import Order
from shipdesk.models.shipment import CourierService, Shipment, ShipmentStatus
from shipdesk.schemas.shipment import ShipmentCreate, ShipmentFields, ShipmentUpdate
from shipdesk.services.shipping.status import apply_status_change
from shipdesk.services.shipping.tracking import tracking_number_exists, unique_tracking_number
from shipdesk.utils.ownership import get_owned, owned_select

log = logging.getLogger(__name__)

DUPLICATE_TRACKING = "A shipment with this tracking number already exists"

_read_options = (selectinload(Shipment.order), selectinload(Shipment.customer))


async def resolve_order_and_customer(db: AsyncSession, order_id: str, customer_id: str, *, user_id):
    order = await get_owned(db, Order, order_id, user_id=user_id, label="Order")
    customer = await get_owned(db, Customer, customer_id, user_id=user_id, label="Customer")
    return order, customer


async def resolve_address(db: AsyncSession, address_id: str, customer_id: str) -> CustomerAddress:
    address = await find_customer_address(db, address_id, customer_id)
    if address is None:
        raise NotFoundError(f"Shipping address {address_id} not found or not authorized")
    return address


async def build_shipment(
    db: AsyncSession,
    data: ShipmentFields,
    *,
    order: Order,
    customer: Customer,
    address: CustomerAddress,
    user_id,
) -> Shipment:
    """Add a shipment for an already-resolved order/customer/address to the session."""
    if data.tracking_number:
        if await tracking_number_exists(db, data.tracking_number):
            raise ConflictError(DUPLICATE_TRACKING)
        tracking_number = data.tracking_number
    else:
        tracking_number = await unique_tracking_number(db)

    shipment = Shipment(
        id=str(uuid.uuid4()),
        order_id=order.id,
        customer_id=customer.id,
        user_id=user_id,
        shipping_address_id=address.id,
        shipping_address_details=address.snapshot(),
        courier_service=data.courier_service,
        shipping_cost=data.shipping_cost,
        number_of_boxes=data.number_of_boxes,
        tracking_number=tracking_number,
        tracking_link=data.tracking_link,
        images=list(data.images),
        videos=list(data.videos),
        dispatch_person_name=data.dispatch_person_name,
        receiver_name=data.receiver_name,
        notes=data.notes,
        status=ShipmentStatus.PENDING,
    )
    db.add(shipment)
    return shipment


async def commit_or_conflict(db: AsyncSession) -> None:
    # the unique index on tracking_number backs up the read-then-write check
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(DUPLICATE_TRACKING)


# --------- Reads ---------
async def get_shipment(db: AsyncSession, shipment_id: str, *, user_id, order_id: Optional[str] = None) -> Shipment:
    if order_id is None:
        return await get_owned(db, Shipment, shipment_id, user_id=user_id, options=_read_options, label="Shipment")

    res = await db.execute(
        owned_select(Shipment, user_id=user_id)
        .where(Shipment.id == shipment_id, Shipment.order_id == order_id)
        .options(*_read_options)
        .execution_options(populate_existing=True)
    )
    shipment = res.scalar_one_or_none()
    if shipment is None:
        raise NotFoundError("Shipment not found or not authorized")
    return shipment


async def list_shipments(
    db: AsyncSession,
    *,
    user_id,
    offset: int = 0,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[ShipmentStatus] = None,
    courier_service: Optional[CourierService] = None,
    order_id: Optional[str] = None,
) -> Tuple[List[Shipment], int]:
    stmt = owned_select(Shipment, user_id=user_id)
    if search:
        like = f"%{search}%"
        stmt = stmt.where(
            or_(
                Shipment.tracking_number.ilike(like),
                Shipment.receiver_name.ilike(like),
                Shipment.dispatch_person_name.ilike(like),
            )
        )
    if status is not None:
        stmt = stmt.where(Shipment.status == status)
    if courier_service is not None:
        stmt = stmt.where(Shipment.courier_service == courier_service)
    if order_id:
        stmt = stmt.where(Shipment.order_id == order_id)

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
    res = await db.execute(
        stmt.options(*_read_options).order_by(Shipment.created_at.desc()).offset(offset).limit(limit)
    )
    return res.scalars().all(), total


async def list_shipments_for_order(db: AsyncSession, order_id: str, *, user_id) -> List[Shipment]:
    order = await get_owned(db, Order, order_id, user_id=user_id, label="Order")
    res = await db.execute(
        owned_select(Shipment, user_id=user_id)
        .where(Shipment.order_id == order.id)
        .options(*_read_options)
        .order_by(Shipment.created_at.desc())
    )
    return res.scalars().all()


# --------- Writes ---------
async def create_shipment(db: AsyncSession, data: ShipmentCreate, *, user_id) -> Shipment:
    order, customer = await resolve_order_and_customer(db, data.order_id, data.customer_id, user_id=user_id)
    address = await resolve_address(db, data.shipping_address, customer.id)

    shipment = await build_shipment(db, data, order=order, customer=customer, address=address, user_id=user_id)
    await commit_or_conflict(db)
    log.info(
        "shipment created: user=%s shipment=%s order=%s tracking=%s",
        user_id, shipment.id, order.id, shipment.tracking_number,
    )
    return await get_shipment(db, shipment.id, user_id=user_id)


async def update_shipment(
    db: AsyncSession, shipment_id: str, data: ShipmentUpdate, *, user_id, order_id: Optional[str] = None
) -> Shipment:
    shipment = await get_shipment(db, shipment_id, user_id=user_id, order_id=order_id)
    updates = data.model_dump(exclude_unset=True)

    new_images = updates.pop("images", None)
    new_videos = updates.pop("videos", None)
    status = updates.pop("status", None)
    address_id = updates.pop("shipping_address", None)
    tracking_number = updates.pop("tracking_number", None)

    if address_id and address_id != shipment.shipping_address_id:
        address = await resolve_address(db, address_id, shipment.customer_id)
        shipment.shipping_address_id = address.id
        shipment.shipping_address_details = address.snapshot()

    if tracking_number and tracking_number != shipment.tracking_number:
        if await tracking_number_exists(db, tracking_number):
            raise ConflictError(DUPLICATE_TRACKING)
        shipment.tracking_number = tracking_number

    for key, value in updates.items():
        if value is None and key not in ("notes", "tracking_link"):
            continue
        setattr(shipment, key, value)

    if new_images or new_videos:
        append_media(shipment, images=new_images or (), videos=new_videos or ())
    if status is not None:
        apply_status_change(shipment, status)

    await commit_or_conflict(db)
    log.info("shipment updated: user=%s shipment=%s status=%s", user_id, shipment.id, shipment.status.value)
    return await get_shipment(db, shipment.id, user_id=user_id)


def append_media(shipment: Shipment, *, images: Iterable[str] = (), videos: Iterable[str] = ()) -> None:
    # JSON columns only track reassignment, so build new lists
    shipment.images = list(shipment.images or []) + list(images)
    shipment.videos = list(shipment.videos or []) + list(videos)


async def add_shipment_media(
    db: AsyncSession, shipment_id: str, *, user_id, images: List[str], videos: List[str]
) -> Shipment:
    shipment = await get_shipment(db, shipment_id, user_id=user_id)
    append_media(shipment, images=images, videos=videos)
    await db.commit()
    log.info(
        "shipment media added: shipment=%s images=%s videos=%s", shipment.id, len(images), len(videos)
    )
    return await get_shipment(db, shipment.id, user_id=user_id)


async def delete_shipment(db: AsyncSession, shipment_id: str, *, user_id) -> None:
    shipment = await get_owned(db, Shipment, shipment_id, user_id=user_id, label="Shipment")
    await db.delete(shipment)
    await db.commit()
    log.info("shipment deleted: user=%s shipment=%s", user_id, shipment_id)
