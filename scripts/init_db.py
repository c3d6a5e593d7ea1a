#!/usr/bin/env python3
"""
Create the database schema and seed the built-in accounts.

Creates every table registered on SQLModel.metadata, then makes sure the
anonymous account (owner of logged out reviews) exists with id
ANONYMOUS_USER_ID. Optionally creates an admin account.

Usage:
    uv run python scripts/init_db.py
    uv run python scripts/init_db.py --admin-username admin --admin-email admin@example.com --admin-password 'S3cretpass'
"""

import argparse
import asyncio
import secrets
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from sqlmodel import SQLModel

import app.models  # noqa: F401  (registers tables on SQLModel.metadata)
from app.config import UserRole, settings
from app.core.database import engine, get_async_session
from app.core.security import get_password_hash, validate_password_strength
from app.models.user import Users


async def init_db(admin_username: str | None, admin_email: str | None, admin_password: str | None) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    print("Tables created")

    async with get_async_session() as db:
        anonymous = await db.get(Users, settings.ANONYMOUS_USER_ID)
        if anonymous is None:
            db.add(
                Users(
                    user_id=settings.ANONYMOUS_USER_ID,
                    username=settings.ANONYMOUS_USERNAME,
                    email=settings.ADMIN_EMAIL,
                    # Random hash nobody knows the password for
                    password=get_password_hash(secrets.token_urlsafe(32)),
                )
            )
            print(f"Created anonymous account (user_id={settings.ANONYMOUS_USER_ID})")

        if admin_username:
            result = await db.execute(select(Users).where(Users.username == admin_username))  # type: ignore[arg-type]
            if result.scalar_one_or_none() is None:
                db.add(
                    Users(
                        username=admin_username,
                        email=admin_email or settings.ADMIN_EMAIL,
                        password=get_password_hash(admin_password),  # type: ignore[arg-type]
                        role=UserRole.ADMIN,
                    )
                )
                print(f"Created admin account '{admin_username}'")
            else:
                print(f"Admin account '{admin_username}' already exists")

        await db.commit()

    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create tables and seed built-in accounts")
    parser.add_argument("--admin-username", help="Create an admin account with this username")
    parser.add_argument("--admin-email", help="Email for the admin account")
    parser.add_argument("--admin-password", help="Password for the admin account")
    args = parser.parse_args()

    if args.admin_username:
        if not args.admin_password:
            parser.error("--admin-password is required with --admin-username")
        is_valid, error_message = validate_password_strength(args.admin_password)
        if not is_valid:
            parser.error(error_message)

    asyncio.run(init_db(args.admin_username, args.admin_email, args.admin_password))


if __name__ == "__main__":
    main()
