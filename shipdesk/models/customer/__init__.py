from .customer import Customer
from .address import CustomerAddress

__all__ = [
    "Customer",
    "CustomerAddress",
]
