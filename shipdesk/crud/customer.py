import logging
from contextlib import asynccontextmanager
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shipdesk.core.exceptions import ConflictError, NotFoundError
from shipdesk.models.customer import Customer, CustomerAddress
from shipdesk.models.customer.address import format_full_address
from shipdesk.models.order import Order
from shipdesk.models.shipment import Shipment
from shipdesk.schemas.customer import (
    AddressCreate,
    AddressUpdate,
    CustomerCreate,
    CustomerUpdate,
    CustomerUpsert,
)
from shipdesk.utils.ownership import get_owned, owned_select
from shipdesk.utils.security import hash_password

log = logging.getLogger(__name__)


@asynccontextmanager
async def committing(db: AsyncSession, conflict_message: str):
    """Commit on exit; a unique-constraint hit (at flush or commit) becomes a 409."""
    try:
        yield
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(conflict_message)


async def _clear_other_primaries(db: AsyncSession, customer_id: str, keep_id: str):
    # Runs inside the caller's transaction, committed together with the flagged row
    await db.execute(
        update(CustomerAddress)
        .where(CustomerAddress.customer_id == customer_id, CustomerAddress.id != keep_id)
        .values(is_primary=False)
    )


async def _find_duplicate(db: AsyncSession, *, user_id, email=None, phone=None, exclude_id=None):
    clauses = []
    if email:
        clauses.append(Customer.email == email)
    if phone:
        clauses.append(Customer.phone == phone)
    if not clauses:
        return None
    stmt = owned_select(Customer, user_id=user_id).where(or_(*clauses))
    if exclude_id:
        stmt = stmt.where(Customer.id != exclude_id)
    res = await db.execute(stmt.limit(1))
    return res.scalars().first()


# --------- Customers ---------
async def list_customers(
    db: AsyncSession, *, user_id, search: Optional[str] = None, offset: int = 0, limit: int = 10
) -> Tuple[List[Customer], int]:
    stmt = owned_select(Customer, user_id=user_id)
    if search:
        like = f"%{search}%"
        stmt = stmt.where(
            or_(Customer.name.ilike(like), Customer.email.ilike(like), Customer.phone.ilike(like))
        )

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
    res = await db.execute(stmt.order_by(Customer.created_at.desc()).offset(offset).limit(limit))
    return res.scalars().all(), total


async def get_customer(db: AsyncSession, customer_id: str, *, user_id) -> Customer:
    return await get_owned(
        db, Customer, customer_id, user_id=user_id,
        options=[selectinload(Customer.addresses)],
        label="Customer",
    )


async def create_customer(db: AsyncSession, data: CustomerCreate, *, user_id) -> Customer:
    if await _find_duplicate(db, user_id=user_id, email=data.email, phone=data.phone):
        raise ConflictError("A customer with this email or phone already exists")

    customer = Customer(
        id=str(uuid.uuid4()),
        user_id=user_id,
        name=data.name,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password) if data.password else None,
    )
    async with committing(db, "A customer with this email or phone already exists"):
        db.add(customer)
        await db.flush()
        for addr in data.addresses:
            await _add_address_row(db, customer.id, addr)
    log.info("customer created: user=%s customer=%s", user_id, customer.id)
    return await get_customer(db, customer.id, user_id=user_id)


async def upsert_customer(
    db: AsyncSession, data: CustomerUpsert, *, user_id
) -> Tuple[Customer, List[CustomerAddress]]:
    """Reuse the tenant's customer matching name, email or phone, else create one.

    Each address is reused when an identical one exists (only its primary
    flag is updated), otherwise it's added.
    """
    match = [Customer.name == data.name, Customer.phone == data.phone]
    if data.email:
        match.append(Customer.email == data.email)
    res = await db.execute(owned_select(Customer, user_id=user_id).where(or_(*match)).limit(1))
    customer = res.scalars().first()

    saved = []
    async with committing(db, "A customer with this email or phone already exists"):
        if customer is None:
            customer = Customer(
                id=str(uuid.uuid4()),
                user_id=user_id,
                name=data.name,
                email=data.email,
                phone=data.phone,
            )
            db.add(customer)
            await db.flush()
            log.info("customer created via upsert: user=%s customer=%s", user_id, customer.id)

        for addr in data.address:
            res = await db.execute(
                select(CustomerAddress).where(
                    CustomerAddress.customer_id == customer.id,
                    CustomerAddress.address_name == addr.address_line,
                    CustomerAddress.city == addr.city,
                    CustomerAddress.pin_code == addr.pin_code,
                    CustomerAddress.state == addr.state,
                )
            )
            existing = res.scalars().first()
            if existing is None:
                saved.append(await _add_address_row(db, customer.id, addr))
                continue

            if "is_primary" in addr.model_fields_set:
                if addr.is_primary:
                    await _clear_other_primaries(db, customer.id, existing.id)
                existing.is_primary = addr.is_primary
            saved.append(existing)

    for address in saved:
        await db.refresh(address)
    return customer, saved


async def update_customer(db: AsyncSession, customer_id: str, data: CustomerUpdate, *, user_id) -> Customer:
    customer = await get_customer(db, customer_id, user_id=user_id)
    updates = data.model_dump(exclude_unset=True, exclude={"password"})
    # name and phone are required columns, a null there means "leave as is"
    for key in ("name", "phone"):
        if key in updates and updates[key] is None:
            del updates[key]

    if await _find_duplicate(
        db, user_id=user_id, email=updates.get("email"), phone=updates.get("phone"), exclude_id=customer.id
    ):
        raise ConflictError("A customer with this email or phone already exists")

    async with committing(db, "A customer with this email or phone already exists"):
        for key, value in updates.items():
            setattr(customer, key, value)
        if data.password:
            customer.password_hash = hash_password(data.password)
    return await get_customer(db, customer.id, user_id=user_id)


async def delete_customer(db: AsyncSession, customer_id: str, *, user_id) -> None:
    customer = await get_customer(db, customer_id, user_id=user_id)

    res = await db.execute(
        owned_select(Order, user_id=user_id).where(Order.customer_id == customer.id).limit(1)
    )
    if res.scalars().first() is not None:
        raise ConflictError("Customer has orders and cannot be deleted")

    # a shipment may name this customer under another customer's order
    res = await db.execute(
        owned_select(Shipment, user_id=user_id).where(Shipment.customer_id == customer.id).limit(1)
    )
    if res.scalars().first() is not None:
        raise ConflictError("Customer has shipments and cannot be deleted")

    # addresses go with it (delete-orphan cascade)
    await db.delete(customer)
    await db.commit()
    log.info("customer deleted: user=%s customer=%s", user_id, customer_id)


# --------- Addresses ---------
async def _add_address_row(db: AsyncSession, customer_id: str, data: AddressCreate) -> CustomerAddress:
    address = CustomerAddress(
        id=str(uuid.uuid4()),
        customer_id=customer_id,
        address_name=data.address_line,
        city=data.city,
        pin_code=data.pin_code,
        state=data.state,
        is_primary=data.is_primary,
        full_address=format_full_address(data.address_line, data.city, data.state, data.pin_code),
    )
    db.add(address)
    await db.flush()
    if data.is_primary:
        await _clear_other_primaries(db, customer_id, address.id)
    return address


async def find_customer_address(db: AsyncSession, address_id: str, customer_id: str) -> Optional[CustomerAddress]:
    res = await db.execute(
        select(CustomerAddress).where(
            CustomerAddress.id == address_id,
            CustomerAddress.customer_id == customer_id,
        )
    )
    return res.scalar_one_or_none()


async def list_addresses(db: AsyncSession, customer_id: str, *, user_id) -> List[CustomerAddress]:
    customer = await get_owned(db, Customer, customer_id, user_id=user_id, label="Customer")
    res = await db.execute(
        select(CustomerAddress)
        .where(CustomerAddress.customer_id == customer.id)
        .order_by(CustomerAddress.is_primary.desc(), CustomerAddress.created_at)
    )
    return res.scalars().all()


async def get_address(db: AsyncSession, customer_id: str, address_id: str, *, user_id) -> CustomerAddress:
    customer = await get_owned(db, Customer, customer_id, user_id=user_id, label="Customer")
    address = await find_customer_address(db, address_id, customer.id)
    if address is None:
        raise NotFoundError("Address not found")
    return address


async def add_address(db: AsyncSession, customer_id: str, data: AddressCreate, *, user_id) -> CustomerAddress:
    customer = await get_owned(db, Customer, customer_id, user_id=user_id, label="Customer")
    async with committing(db, "This address already exists for the customer"):
        address = await _add_address_row(db, customer.id, data)
    await db.refresh(address)
    log.info("address added: customer=%s address=%s primary=%s", customer.id, address.id, address.is_primary)
    return address


async def update_address(
    db: AsyncSession, customer_id: str, address_id: str, data: AddressUpdate, *, user_id
) -> CustomerAddress:
    address = await get_address(db, customer_id, address_id, user_id=user_id)
    updates = data.model_dump(exclude_unset=True)

    async with committing(db, "This address already exists for the customer"):
        if updates.get("address_line") is not None:
            address.address_name = updates["address_line"]
        for key in ("city", "pin_code", "state"):
            if updates.get(key) is not None:
                setattr(address, key, updates[key])
        address.refresh_full_address()

        if updates.get("is_primary") is not None:
            if updates["is_primary"]:
                await _clear_other_primaries(db, address.customer_id, address.id)
            address.is_primary = updates["is_primary"]

    await db.refresh(address)
    return address


async def delete_address(db: AsyncSession, customer_id: str, address_id: str, *, user_id) -> None:
    address = await get_address(db, customer_id, address_id, user_id=user_id)
    await db.delete(address)
    await db.commit()
