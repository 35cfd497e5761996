from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shipdesk.auth.dependencies import get_owner_id
from shipdesk.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from shipdesk.crud import order as order_crud
from shipdesk.db import get_db
from shipdesk.models.order import OrderStatus
from shipdesk.schemas.common import dump, dump_many
from shipdesk.schemas.order import OrderCreate, OrderDetail, OrderListItem, OrderRead, OrderStatusUpdate, OrderUpdate
from shipdesk.schemas.shipment import ShipmentRead
from shipdesk.utils.pagination import page_bounds, page_info

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _list_item(order, shipment_count: int) -> dict:
    item = OrderListItem.model_validate(order).model_copy(update={"shipment_count": shipment_count})
    return item.model_dump(mode="json", by_alias=True)


def _detail(order) -> dict:
    statuses = [s.status.value for s in order.shipments]
    detail = OrderDetail.model_validate(order).model_copy(
        update={
            "shipment_count": len(statuses),
            "shipment_statuses": statuses,
            "distinct_shipment_statuses": list(dict.fromkeys(statuses)),
        }
    )
    body = detail.model_dump(mode="json", by_alias=True)
    body["shipments"] = dump_many(ShipmentRead, order.shipments)
    return body


@router.post("", status_code=201)
async def create_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    order = await order_crud.create_order(db, data, user_id=owner_id)
    return {"status": True, "message": "Order created successfully", "data": dump(OrderRead, order)}


@router.get("")
async def list_orders(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    sortBy: str = "createdAt",
    sortOrder: str = "desc",
    orderStatus: Optional[OrderStatus] = None,
    customerId: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    offset, limit = page_bounds(page, limit, MAX_PAGE_SIZE)
    rows, total = await order_crud.list_orders(
        db,
        user_id=owner_id,
        offset=offset,
        limit=limit,
        search=search,
        sort_by=sortBy,
        sort_order=sortOrder.lower(),
        order_status=orderStatus,
        customer_id=customerId,
    )
    return {
        "status": True,
        "message": "Orders fetched successfully",
        "data": [_list_item(order, count) for order, count in rows],
        "pagination": page_info(page, limit, total),
    }


@router.get("/customer/{customer_id}")
async def list_customer_orders(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    rows = await order_crud.list_orders_for_customer(db, customer_id, user_id=owner_id)
    return {
        "status": True,
        "message": "Orders fetched successfully",
        "data": [_list_item(order, count) for order, count in rows],
    }


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    order = await order_crud.get_order(db, order_id, user_id=owner_id, with_shipments=True)
    return {"status": True, "message": "Order fetched successfully", "data": _detail(order)}


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    order = await order_crud.update_order_status(db, order_id, data.order_status, user_id=owner_id)
    return {"status": True, "message": "Order status updated successfully", "data": dump(OrderRead, order)}


@router.put("/{order_id}")
async def update_order(
    order_id: str,
    data: OrderUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    order = await order_crud.update_order(db, order_id, data, user_id=owner_id)
    return {"status": True, "message": "Order updated successfully", "data": dump(OrderRead, order)}


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    await order_crud.delete_order(db, order_id, user_id=owner_id)
    return {"status": True, "message": "Order deleted successfully"}
