from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from shipdesk.models.order import OrderStatus
from shipdesk.schemas.common import CamelModel
from shipdesk.schemas.customer import CustomerSummary

ORDER_DATE_FORMAT = "%d-%m-%Y"


def _check_order_date(v):
    if v is None:
        return v
    try:
        datetime.strptime(v, ORDER_DATE_FORMAT)
    except ValueError:
        raise ValueError("Please enter date in DD-MM-YYYY format")
    return v


class Dimensions(CamelModel):
    length: float = Field(ge=0.1)
    width: float = Field(ge=0.1)
    height: float = Field(ge=0.1)


class OrderCreate(CamelModel):
    customer_id: str = Field(min_length=1)
    product_information: str = Field(min_length=1)
    product_description: Optional[str] = None
    quantity: int = Field(ge=1)
    number_of_boxes: int = Field(ge=1)
    order_date: str = Field(pattern=r"^\d{2}-\d{2}-\d{4}$")
    weight: float = Field(ge=0.1)
    order_value: float = Field(ge=0)
    dimensions: Dimensions
    special_instructions: str = ""

    @field_validator("order_date")
    @classmethod
    def valid_order_date(cls, v):
        return _check_order_date(v)


class OrderUpdate(CamelModel):
    # id, userId, customerId, orderNumber and timestamps are not patchable;
    # unknown keys are ignored so a client can send the whole order back
    product_information: Optional[str] = Field(None, min_length=1)
    product_description: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    number_of_boxes: Optional[int] = Field(None, ge=1)
    order_date: Optional[str] = Field(None, pattern=r"^\d{2}-\d{2}-\d{4}$")
    weight: Optional[float] = Field(None, ge=0.1)
    order_value: Optional[float] = Field(None, ge=0)
    dimensions: Optional[Dimensions] = None
    order_status: Optional[OrderStatus] = None
    special_instructions: Optional[str] = None

    @field_validator("order_date")
    @classmethod
    def valid_order_date(cls, v):
        return _check_order_date(v)


class OrderStatusUpdate(CamelModel):
    order_status: OrderStatus


class OrderSummary(CamelModel):
    id: str
    order_number: str


class OrderRead(CamelModel):
    id: str
    order_number: str
    customer_id: str
    product_information: str
    product_description: Optional[str] = None
    quantity: int
    number_of_boxes: int
    order_date: str
    weight: float
    order_value: float
    dimensions: Dimensions
    order_status: OrderStatus
    special_instructions: str = ""
    created_at: datetime
    updated_at: datetime
    customer: Optional[CustomerSummary] = None


class OrderListItem(OrderRead):
    shipment_count: int = 0


class OrderDetail(OrderRead):
    shipment_count: int = 0
    shipment_statuses: List[str] = []
    distinct_shipment_statuses: List[str] = []
