"""
Several shipments for one order in a single request.

Order and customer are resolved once for the batch; each entry's address is
checked against that customer as the loop reaches it. By default every entry
is committed as soon as it's built, so entries before a failing one stay
stored. With ``atomic`` the batch is one transaction.
"""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from shipdesk.crud import shipment as shipment_crud
from shipdesk.models.shipment import Shipment
from shipdesk.schemas.shipment import BulkShipmentCreate

log = logging.getLogger(__name__)


async def create_bulk_shipments(db: AsyncSession, data: BulkShipmentCreate, *, user_id) -> List[Shipment]:
    order, customer = await shipment_crud.resolve_order_and_customer(
        db, data.order_id, data.customer_id, user_id=user_id
    )

    created = []
    try:
        for index, item in enumerate(data.shipments, start=1):
            address = await shipment_crud.resolve_address(db, item.shipping_address, customer.id)
            shipment = await shipment_crud.build_shipment(
                db, item, order=order, customer=customer, address=address, user_id=user_id
            )
            if not data.atomic:
                await shipment_crud.commit_or_conflict(db)
            created.append(shipment.id)
            log.debug("bulk shipment %s/%s built: %s", index, len(data.shipments), shipment.tracking_number)

        if data.atomic:
            await shipment_crud.commit_or_conflict(db)
    except Exception:
        await db.rollback()
        log.warning(
            "bulk shipment aborted: user=%s order=%s kept=%s atomic=%s",
            user_id, data.order_id, 0 if data.atomic else len(created), data.atomic,
        )
        raise

    log.info("bulk shipments created: user=%s order=%s count=%s", user_id, data.order_id, len(created))
    return [await shipment_crud.get_shipment(db, shipment_id, user_id=user_id) for shipment_id in created]
