import logging
import uuid
from typing import Optional

from fastapi import Request
from fastapi_users import BaseUserManager, UUIDIDMixin

from shipdesk.auth.config import auth_config
from shipdesk.models.user import User

log = logging.getLogger(__name__)


class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = auth_config.secret
    verification_token_secret = auth_config.secret

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        log.info("user registered: id=%s email=%s role=%s", user.id, user.email, user.role)

    async def on_after_login(self, user: User, request: Optional[Request] = None, response=None):
        log.info("user logged in: id=%s", user.id)
