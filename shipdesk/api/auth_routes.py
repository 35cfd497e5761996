from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shipdesk.auth.dependencies import get_current_admin_user
from shipdesk.auth.routes import get_current_user
from shipdesk.db import get_db
from shipdesk.models.user import User
from shipdesk.schemas.user import UserRead

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_body(user: User) -> dict:
    return UserRead.model_validate(user, from_attributes=True).model_dump(mode="json")


@router.get("/profile")
async def profile(user: User = Depends(get_current_user)):
    return {"status": True, "message": "Profile fetched successfully", "user": _user_body(user)}


@router.get("/users")
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user),
):
    res = await db.execute(select(User).order_by(User.email))
    users = res.scalars().all()
    return {
        "status": True,
        "message": "Users fetched successfully",
        "count": len(users),
        "users": [_user_body(u) for u in users],
    }
