from datetime import datetime

from shipdesk.models.shipment import Shipment, ShipmentStatus


def apply_status_change(shipment: Shipment, status: ShipmentStatus, now: datetime = None) -> None:
    """Set the status and stamp dispatched/delivered the first time only.

    Any status may follow any other. Re-sending the same status leaves
    the existing stamp untouched.
    """
    now = now or datetime.utcnow()
    shipment.status = status
    if status == ShipmentStatus.DISPATCHED and shipment.dispatched_at is None:
        shipment.dispatched_at = now
    elif status == ShipmentStatus.DELIVERED and shipment.delivered_at is None:
        shipment.delivered_at = now
