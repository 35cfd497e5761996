from datetime import datetime
import enum
import uuid

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import JSON, Column, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from shipdesk.models.base import Base


class CourierService(str, enum.Enum):
    FEDEX = "FedEx"
    DHL = "DHL"
    UPS = "UPS"
    BLUE_DART = "Blue Dart"
    DELHIVERY = "Delhivery"
    INDIA_POST = "India Post"
    OTHER = "Other"


class ShipmentStatus(str, enum.Enum):
    PENDING = "Pending"
    DISPATCHED = "Dispatched"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


def _enum_values(e):
    return [m.value for m in e]


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String, ForeignKey("orders.id"), nullable=False)
    customer_id = Column(String, ForeignKey("customers.id"), nullable=False)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Address row may be deleted later; the snapshot keeps what was shipped to
    shipping_address_id = Column(
        String, ForeignKey("customer_addresses.id", ondelete="SET NULL"), nullable=True
    )
    shipping_address_details = Column(JSON, nullable=True)

    courier_service = Column(
        Enum(CourierService, name="courier_service", values_callable=_enum_values),
        nullable=False,
    )
    shipping_cost = Column(Float, nullable=False)
    number_of_boxes = Column(Integer, nullable=False)
    tracking_number = Column(String, unique=True, nullable=False)
    tracking_link = Column(String, nullable=True)

    images = Column(JSON, default=list, nullable=False)
    videos = Column(JSON, default=list, nullable=False)

    dispatch_person_name = Column(String, nullable=False)
    receiver_name = Column(String, nullable=False)
    notes = Column(Text, nullable=True)

    status = Column(
        Enum(ShipmentStatus, name="shipment_status", values_callable=_enum_values),
        default=ShipmentStatus.PENDING,
        nullable=False,
    )
    dispatched_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    order = relationship("Order", back_populates="shipments")
    customer = relationship("Customer")
    shipping_address = relationship("CustomerAddress")

    __table_args__ = (
        Index("idx_shipments_user", "user_id"),
        Index("idx_shipments_order", "user_id", "order_id"),
    )
