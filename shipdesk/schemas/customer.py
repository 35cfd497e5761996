from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, EmailStr, Field, field_validator

from shipdesk.schemas.common import CamelModel

# older clients send "primary" instead of "isPrimary"
PRIMARY_ALIASES = AliasChoices("isPrimary", "primary", "is_primary")


# ---------- Addresses ----------
class AddressCreate(CamelModel):
    address_line: str = Field(min_length=1)
    city: str = Field(min_length=1)
    pin_code: str = Field(min_length=1)
    state: str = Field(min_length=1)
    is_primary: bool = Field(False, validation_alias=PRIMARY_ALIASES)


class AddressUpdate(CamelModel):
    address_line: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    pin_code: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = Field(None, min_length=1)
    is_primary: Optional[bool] = Field(None, validation_alias=PRIMARY_ALIASES)


class AddressRead(CamelModel):
    id: str
    customer_id: str
    address_line: str
    city: str
    pin_code: str
    state: str
    is_primary: bool
    full_address: str


# ---------- Customers ----------
class CustomerCreate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    password: Optional[str] = None
    addresses: List[AddressCreate] = Field(min_length=1)


class CustomerUpsert(CamelModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: str = Field(min_length=1)
    address: List[AddressCreate] = []

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CustomerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = None


class CustomerSummary(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: str


class CustomerRead(CustomerSummary):
    created_at: datetime
    updated_at: datetime


class CustomerDetail(CustomerRead):
    addresses: List[AddressRead] = []
