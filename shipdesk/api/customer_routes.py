from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shipdesk.auth.dependencies import get_owner_id
from shipdesk.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from shipdesk.crud import customer as customer_crud
from shipdesk.db import get_db
from shipdesk.schemas.common import dump, dump_many
from shipdesk.schemas.customer import (
    AddressCreate,
    AddressRead,
    AddressUpdate,
    CustomerCreate,
    CustomerDetail,
    CustomerRead,
    CustomerUpdate,
    CustomerUpsert,
)
from shipdesk.utils.pagination import page_bounds, page_info

router = APIRouter(prefix="/api/customers", tags=["customers"])


def _detail(customer) -> dict:
    body = dump(CustomerDetail, customer)
    # primary address first
    body["addresses"].sort(key=lambda a: not a["isPrimary"])
    return body


# ---------- Customers ----------
@router.post("", status_code=201)
async def create_customer(
    data: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    customer = await customer_crud.create_customer(db, data, user_id=owner_id)
    return {"status": True, "message": "Customer created successfully", "data": _detail(customer)}


@router.post("/upsert")
async def upsert_customer(
    data: CustomerUpsert,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    customer, addresses = await customer_crud.upsert_customer(db, data, user_id=owner_id)
    return {
        "status": True,
        "message": "Customer saved successfully",
        "data": {
            "customer": dump(CustomerRead, customer),
            "addresses": dump_many(AddressRead, addresses),
        },
    }


@router.get("")
async def list_customers(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    offset, limit = page_bounds(page, limit, MAX_PAGE_SIZE)
    customers, total = await customer_crud.list_customers(
        db, user_id=owner_id, search=search, offset=offset, limit=limit
    )
    return {
        "status": True,
        "message": "Customers fetched successfully",
        "data": dump_many(CustomerRead, customers),
        "pagination": page_info(page, limit, total),
    }


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    customer = await customer_crud.get_customer(db, customer_id, user_id=owner_id)
    return {"status": True, "message": "Customer fetched successfully", "data": _detail(customer)}


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    customer = await customer_crud.update_customer(db, customer_id, data, user_id=owner_id)
    return {"status": True, "message": "Customer updated successfully", "data": _detail(customer)}


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    await customer_crud.delete_customer(db, customer_id, user_id=owner_id)
    return {"status": True, "message": "Customer deleted successfully"}


# ---------- Addresses ----------
@router.get("/{customer_id}/addresses")
async def list_addresses(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    addresses = await customer_crud.list_addresses(db, customer_id, user_id=owner_id)
    return {"status": True, "message": "Addresses fetched successfully", "data": dump_many(AddressRead, addresses)}


@router.post("/{customer_id}/addresses", status_code=201)
async def add_address(
    customer_id: str,
    data: AddressCreate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    address = await customer_crud.add_address(db, customer_id, data, user_id=owner_id)
    return {"status": True, "message": "Address added successfully", "data": dump(AddressRead, address)}


@router.get("/{customer_id}/addresses/{address_id}")
async def get_address(
    customer_id: str,
    address_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    address = await customer_crud.get_address(db, customer_id, address_id, user_id=owner_id)
    return {"status": True, "message": "Address fetched successfully", "data": dump(AddressRead, address)}


@router.put("/{customer_id}/addresses/{address_id}")
async def update_address(
    customer_id: str,
    address_id: str,
    data: AddressUpdate,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    address = await customer_crud.update_address(db, customer_id, address_id, data, user_id=owner_id)
    return {"status": True, "message": "Address updated successfully", "data": dump(AddressRead, address)}


@router.delete("/{customer_id}/addresses/{address_id}")
async def delete_address(
    customer_id: str,
    address_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id=Depends(get_owner_id),
):
    await customer_crud.delete_address(db, customer_id, address_id, user_id=owner_id)
    return {"status": True, "message": "Address deleted successfully"}
