from datetime import datetime
import uuid

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship

from shipdesk.models.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=False)
    password_hash = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="customers")
    addresses = relationship(
        "CustomerAddress",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="CustomerAddress.created_at",
    )
    orders = relationship("Order", back_populates="customer", passive_deletes=True)

    # Email and phone are unique per tenant, not globally
    __table_args__ = (
        UniqueConstraint("user_id", "email", name="uq_customer_user_email"),
        UniqueConstraint("user_id", "phone", name="uq_customer_user_phone"),
        Index("idx_customers_user", "user_id"),
    )
