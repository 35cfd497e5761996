from .base import Base
from .user import User
from .customer.customer import Customer
from .customer.address import CustomerAddress
from .order import Order, OrderStatus
from .shipment import Shipment, ShipmentStatus, CourierService
