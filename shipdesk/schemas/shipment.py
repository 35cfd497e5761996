from datetime import datetime
from typing import List, Optional

from pydantic import Field

from shipdesk.models.shipment import CourierService, ShipmentStatus
from shipdesk.schemas.common import CamelModel
from shipdesk.schemas.customer import CustomerSummary
from shipdesk.schemas.order import OrderSummary

TRACKING_LINK_PATTERN = r"^https?://.+"


class ShipmentFields(CamelModel):
    shipping_address: str = Field(min_length=1)
    courier_service: CourierService
    shipping_cost: float = Field(ge=0)
    number_of_boxes: int = Field(ge=1, le=20)
    tracking_number: Optional[str] = None
    tracking_link: Optional[str] = Field(None, pattern=TRACKING_LINK_PATTERN)
    dispatch_person_name: str = Field(min_length=1)
    receiver_name: str = Field(min_length=1)
    notes: Optional[str] = None
    images: List[str] = []
    videos: List[str] = []


class ShipmentCreate(ShipmentFields):
    order_id: str = Field(min_length=1)
    customer_id: str = Field(min_length=1)


class BulkShipmentItem(ShipmentFields):
    pass


class BulkShipmentCreate(CamelModel):
    order_id: str = Field(min_length=1)
    customer_id: str = Field(min_length=1)
    shipments: List[BulkShipmentItem] = Field(min_length=1)
    # all-or-nothing instead of keeping the entries created before a failure
    atomic: bool = False


class ShipmentUpdate(CamelModel):
    shipping_address: Optional[str] = Field(None, min_length=1)
    courier_service: Optional[CourierService] = None
    shipping_cost: Optional[float] = Field(None, ge=0)
    number_of_boxes: Optional[int] = Field(None, ge=1, le=20)
    tracking_number: Optional[str] = Field(None, min_length=1)
    tracking_link: Optional[str] = Field(None, pattern=TRACKING_LINK_PATTERN)
    dispatch_person_name: Optional[str] = Field(None, min_length=1)
    receiver_name: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    status: Optional[ShipmentStatus] = None
    # appended to what the shipment already has
    images: Optional[List[str]] = None
    videos: Optional[List[str]] = None


class ShipmentRead(CamelModel):
    id: str
    order_id: str
    customer_id: str
    shipping_address_id: Optional[str] = Field(None, serialization_alias="shippingAddress")
    shipping_address_details: Optional[dict] = None
    courier_service: CourierService
    shipping_cost: float
    number_of_boxes: int
    tracking_number: str
    tracking_link: Optional[str] = None
    images: List[str] = []
    videos: List[str] = []
    dispatch_person_name: str
    receiver_name: str
    notes: Optional[str] = None
    status: ShipmentStatus
    dispatched_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    order: Optional[OrderSummary] = None
    customer: Optional[CustomerSummary] = None
