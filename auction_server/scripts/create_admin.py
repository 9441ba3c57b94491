#!/usr/bin/env python3
# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Create admin user. Run: python -m auction_server.scripts.create_admin"""

import asyncio
import getpass
import sys

from sqlalchemy import select

from auction_server.auth import hash_password
from auction_server.database import async_session_maker, init_db
from auction_server.models import Role, User


async def main():
    await init_db()
    user_name = input("Admin name: ").strip()
    email = input("Admin email: ").strip()
    phone = input("Phone: ").strip()
    address = input("Address: ").strip()
    password = getpass.getpass("Password: ")
    if not user_name or not email or not phone or not address or not password:
        print("All fields required")
        sys.exit(1)

    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            print("User already exists")
            sys.exit(1)
        session.add(
            User(
                user_name=user_name,
                email=email,
                phone=phone,
                address=address,
                password_hash=hash_password(password),
                role=Role.ADMIN.value,
            )
        )
        await session.commit()
        print("Admin user created.")


def cli():
    asyncio.run(main())


if __name__ == "__main__":
    cli()
