# auth/dependencies.py
from fastapi import Depends, HTTPException

from shipdesk.auth.routes import get_current_user
from shipdesk.models.user import User


async def get_current_admin_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access only")
    return user


def get_owner_id(user: User = Depends(get_current_user)):
    """The tenant key every store query is filtered by."""
    return user.id
