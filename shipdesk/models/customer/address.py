from datetime import datetime
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship

from shipdesk.models.base import Base


def format_full_address(address_line: str, city: str, state: str, pin_code: str) -> str:
    return f"{address_line}, {city}, {state} - {pin_code}"


class CustomerAddress(Base):
    __tablename__ = "customer_addresses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(String, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    address_name = Column(String, nullable=False)  # street / address line
    city = Column(String, nullable=False)
    pin_code = Column(String, nullable=False)
    state = Column(String, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
    full_address = Column(String, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    customer = relationship("Customer", back_populates="addresses")

    __table_args__ = (
        UniqueConstraint(
            "customer_id", "address_name", "city", "pin_code", "state",
            name="uq_customer_address_identity",
        ),
        Index("idx_customer_addresses_customer", "customer_id"),
    )

    @property
    def address_line(self) -> str:
        return self.address_name

    def refresh_full_address(self) -> None:
        self.full_address = format_full_address(self.address_name, self.city, self.state, self.pin_code)

    def snapshot(self) -> dict:
        """Copy of the address stored on shipments so later edits don't rewrite history."""
        return {
            "addressLine": self.address_name,
            "city": self.city,
            "pinCode": self.pin_code,
            "state": self.state,
            "fullAddress": self.full_address,
        }
