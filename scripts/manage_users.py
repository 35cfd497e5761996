# scripts/manage_users.py

import argparse
import asyncio
import logging
import os
import sys
import uuid

from sqlalchemy import select

from shipdesk.core.config import settings
from shipdesk.core.logging import setup_logging
from shipdesk.db import async_session, create_db_and_tables
from shipdesk.models.user import User
from shipdesk.utils.security import hash_password

log = logging.getLogger("manage_users")

# 🎯 Default admin, override with ADMIN_EMAIL / ADMIN_PASSWORD
DEFAULT_ADMIN = {
    "name": "Admin",
    "email": os.getenv("ADMIN_EMAIL", "admin@example.com"),
    "password": os.getenv("ADMIN_PASSWORD", "change-me-now"),
    "role": "admin",
}

if sys.platform.startswith('win') and sys.version_info < (3, 10):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


async def seed_user(name, email, password, role="admin"):
    await create_db_and_tables()
    async with async_session() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            log.warning("User '%s' already exists. Skipping.", email)
            return

        session.add(
            User(
                id=uuid.uuid4(),
                name=name,
                email=email,
                hashed_password=hash_password(password),
                role=role,
                is_active=True,
                is_superuser=role == "admin",
                is_verified=True,
            )
        )
        await session.commit()
        log.info("Created: %s (%s)", email, role)


async def delete_users(email=None, role=None):
    async with async_session() as session:
        if email:
            stmt = select(User).where(User.email == email)
        elif role:
            stmt = select(User).where(User.role == role)
        else:
            log.error("Specify either --email or --role to delete users.")
            return

        users = (await session.execute(stmt)).scalars().all()
        if not users:
            log.warning("No users matched.")
            return
        for user in users:
            await session.delete(user)
        await session.commit()
        log.info("Deleted %s user(s)", len(users))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Manage ShipDesk users")
    parser.add_argument("--seed", action="store_true", help="Create a user (default: the admin)")
    parser.add_argument("--delete", action="store_true", help="Delete users")
    parser.add_argument("--name", type=str, default=DEFAULT_ADMIN["name"])
    parser.add_argument("--email", type=str, help="Email of the user to create or delete")
    parser.add_argument("--password", type=str, default=DEFAULT_ADMIN["password"])
    parser.add_argument("--role", type=str, help="admin or user")

    args = parser.parse_args()
    setup_logging(settings.log_level)

    if args.seed:
        asyncio.run(
            seed_user(
                args.name,
                args.email or DEFAULT_ADMIN["email"],
                args.password,
                args.role or DEFAULT_ADMIN["role"],
            )
        )
    elif args.delete:
        asyncio.run(delete_users(email=args.email, role=args.role))
    else:
        parser.print_help()


### Action	Command
#Seed the admin	python -m scripts.manage_users --seed
#Seed a user	python -m scripts.manage_users --seed --email ops@example.com --password secret --role user
#Delete one user	python -m scripts.manage_users --delete --email ops@example.com
