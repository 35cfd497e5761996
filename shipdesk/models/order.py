from datetime import datetime
import enum
import uuid

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from shipdesk.models.base import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def generate_order_number(now: datetime = None) -> str:
    """Date and time digits down to the millisecond, e.g. 20261019143005123."""
    now = now or datetime.utcnow()
    return now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(String, ForeignKey("customers.id"), nullable=False)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    order_number = Column(String, nullable=False, default=generate_order_number)

    product_information = Column(String, nullable=False)
    product_description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False)
    number_of_boxes = Column(Integer, nullable=False)
    order_date = Column(String, nullable=False)  # DD-MM-YYYY, kept as entered
    weight = Column(Float, nullable=False)
    order_value = Column(Float, nullable=False)

    length = Column(Float, nullable=False)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)

    order_status = Column(
        Enum(OrderStatus, name="order_status", values_callable=lambda e: [m.value for m in e]),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    special_instructions = Column(Text, default="", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    customer = relationship("Customer", back_populates="orders")
    shipments = relationship(
        "Shipment", back_populates="order", order_by="Shipment.created_at", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_orders_user", "user_id"),
        Index("idx_orders_user_customer", "user_id", "customer_id"),
    )

    @property
    def dimensions(self) -> dict:
        return {"length": self.length, "width": self.width, "height": self.height}
