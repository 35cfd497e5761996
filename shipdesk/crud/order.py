import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shipdesk.core.exceptions import ConflictError, ValidationError
from shipdesk.models.customer import Customer
from shipdesk.models.order import Order, OrderStatus, generate_order_number
from shipdesk.models.shipment import Shipment
from shipdesk.schemas.order import OrderCreate, OrderUpdate
from shipdesk.utils.ownership import get_owned, owned_select
from shipdesk.utils.pagination import parse_number

log = logging.getLogger(__name__)

# DD-MM-YYYY sorts chronologically once rearranged to YYYYMMDD
_order_date_key = (
    func.substr(Order.order_date, 7, 4, type_=String)
    + func.substr(Order.order_date, 4, 2, type_=String)
    + func.substr(Order.order_date, 1, 2, type_=String)
)

SORT_FIELDS = {
    "createdAt": Order.created_at,
    "updatedAt": Order.updated_at,
    "orderDate": _order_date_key,
    "orderNumber": Order.order_number,
    "orderValue": Order.order_value,
    "weight": Order.weight,
    "quantity": Order.quantity,
    "numberOfBoxes": Order.number_of_boxes,
    "orderStatus": cast(Order.order_status, String),
}

SEARCH_TEXT_FIELDS = (
    Order.order_number,
    Order.product_information,
    Order.product_description,
    Order.special_instructions,
    Order.order_date,
)

SEARCH_NUMBER_FIELDS = (
    Order.quantity,
    Order.number_of_boxes,
    Order.weight,
    Order.order_value,
)


def shipment_count_column():
    return (
        select(func.count(Shipment.id))
        .where(Shipment.order_id == Order.id)
        .correlate(Order)
        .scalar_subquery()
        .label("shipment_count")
    )


def _search_clause(term: str):
    like = f"%{term}%"
    clauses = [field.ilike(like) for field in SEARCH_TEXT_FIELDS]
    clauses.append(cast(Order.order_status, String).ilike(like))
    number = parse_number(term)
    if number is not None:
        clauses.extend(field == number for field in SEARCH_NUMBER_FIELDS)
    return or_(*clauses)


async def list_orders(
    db: AsyncSession,
    *,
    user_id,
    offset: int = 0,
    limit: int = 10,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    order_status: Optional[OrderStatus] = None,
    customer_id: Optional[str] = None,
) -> Tuple[List[Tuple[Order, int]], int]:
    if sort_by not in SORT_FIELDS:
        raise ValidationError(
            f"Invalid sort field '{sort_by}'. Allowed: {', '.join(sorted(SORT_FIELDS))}"
        )
    if sort_order not in ("asc", "desc"):
        raise ValidationError("sortOrder must be 'asc' or 'desc'")

    stmt = owned_select(Order, user_id=user_id)
    if search:
        stmt = stmt.where(_search_clause(search))
    if order_status is not None:
        stmt = stmt.where(Order.order_status == order_status)
    if customer_id:
        stmt = stmt.where(Order.customer_id == customer_id)

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    sort_col = SORT_FIELDS[sort_by]
    ordering = sort_col.asc() if sort_order == "asc" else sort_col.desc()
    rows = await db.execute(
        stmt.add_columns(shipment_count_column())
        .options(selectinload(Order.customer))
        .order_by(ordering, Order.created_at.desc(), Order.id)
        .offset(offset)
        .limit(limit)
    )
    return [(order, count) for order, count in rows.all()], total


async def list_orders_for_customer(db: AsyncSession, customer_id: str, *, user_id) -> List[Tuple[Order, int]]:
    customer = await get_owned(db, Customer, customer_id, user_id=user_id, label="Customer")
    rows = await db.execute(
        owned_select(Order, user_id=user_id)
        .where(Order.customer_id == customer.id)
        .add_columns(shipment_count_column())
        .options(selectinload(Order.customer))
        .order_by(Order.created_at.desc())
    )
    return [(order, count) for order, count in rows.all()]


async def get_order(db: AsyncSession, order_id: str, *, user_id, with_shipments: bool = False) -> Order:
    options = [selectinload(Order.customer)]
    if with_shipments:
        # Shipment.order comes from the identity map; reloading it here would
        # reset Order.shipments under populate_existing
        options.append(selectinload(Order.shipments).options(selectinload(Shipment.customer)))
    return await get_owned(db, Order, order_id, user_id=user_id, options=options, label="Order")


async def create_order(db: AsyncSession, data: OrderCreate, *, user_id) -> Order:
    customer = await get_owned(db, Customer, data.customer_id, user_id=user_id, label="Customer")

    order = Order(
        id=str(uuid.uuid4()),
        customer_id=customer.id,
        user_id=user_id,
        order_number=generate_order_number(),
        product_information=data.product_information,
        product_description=data.product_description,
        quantity=data.quantity,
        number_of_boxes=data.number_of_boxes,
        order_date=data.order_date,
        weight=data.weight,
        order_value=data.order_value,
        length=data.dimensions.length,
        width=data.dimensions.width,
        height=data.dimensions.height,
        special_instructions=data.special_instructions or "",
        order_status=OrderStatus.PENDING,
    )
    db.add(order)
    await db.commit()
    log.info("order created: user=%s order=%s number=%s", user_id, order.id, order.order_number)
    return await get_order(db, order.id, user_id=user_id)


async def update_order_status(db: AsyncSession, order_id: str, status: OrderStatus, *, user_id) -> Order:
    order = await get_order(db, order_id, user_id=user_id)
    previous = order.order_status
    order.order_status = status
    await db.commit()
    log.info("order status: order=%s %s -> %s", order.id, previous.value, status.value)
    return await get_order(db, order.id, user_id=user_id)


async def update_order(db: AsyncSession, order_id: str, data: OrderUpdate, *, user_id) -> Order:
    order = await get_order(db, order_id, user_id=user_id)
    updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    dimensions = updates.pop("dimensions", None)
    if dimensions:
        order.length = dimensions["length"]
        order.width = dimensions["width"]
        order.height = dimensions["height"]
    for key, value in updates.items():
        setattr(order, key, value)

    await db.commit()
    return await get_order(db, order.id, user_id=user_id)


async def delete_order(db: AsyncSession, order_id: str, *, user_id) -> None:
    order = await get_order(db, order_id, user_id=user_id)

    res = await db.execute(
        owned_select(Shipment, user_id=user_id).where(Shipment.order_id == order.id).limit(1)
    )
    if res.scalars().first() is not None:
        raise ConflictError("Order has shipments and cannot be deleted")

    await db.delete(order)
    await db.commit()
    log.info("order deleted: user=%s order=%s", user_id, order_id)
