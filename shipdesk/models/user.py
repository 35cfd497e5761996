from fastapi_users_db_sqlalchemy import SQLAlchemyBaseUserTableUUID
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from shipdesk.models.base import Base


class User(SQLAlchemyBaseUserTableUUID, Base):
    """A tenant. Every customer, order and shipment belongs to exactly one user."""
    __tablename__ = "users"

    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")  # "admin", "user"

    customers = relationship("Customer", back_populates="user", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
