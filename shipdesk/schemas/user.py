import uuid
from typing import Optional

from fastapi_users import schemas


class UserRead(schemas.BaseUser[uuid.UUID]):
    name: str
    phone: Optional[str] = None
    role: str


class UserCreate(schemas.BaseUserCreate):
    # role is not accepted here; admins come from scripts/manage_users.py
    name: str
    phone: Optional[str] = None
