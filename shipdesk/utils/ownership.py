# utils/ownership.py
"""
Row-level tenancy.

Every store query goes through ``owned_select`` / ``get_owned`` so the
owner filter can't be forgotten: ``user_id`` is keyword-only and required.
"""
from typing import Optional, Type, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shipdesk.core.exceptions import NotFoundError

T = TypeVar("T")


def owned_select(model: Type[T], *, user_id) -> Select:
    if user_id is None:
        raise ValueError("owner id is required for tenant-scoped queries")
    return select(model).where(model.user_id == user_id)


async def get_owned(
    db: AsyncSession,
    model: Type[T],
    obj_id: str,
    *,
    user_id,
    options=(),
    label: Optional[str] = None,
) -> T:
    """Fetch one row owned by ``user_id`` or raise 404."""
    stmt = (
        owned_select(model, user_id=user_id)
        .where(model.id == obj_id)
        .options(*options)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(stmt)
    obj = res.scalar_one_or_none()
    if obj is None:
        raise NotFoundError(f"{label or model.__name__} not found or not authorized")
    return obj
