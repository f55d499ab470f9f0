#!/usr/bin/env python3
"""
Create the SUPER_ADMIN account from the environment.

Reads SUPER_ADMIN_USERNAME, SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD
(.env is honoured). Running it again reports the existing account.

Usage:
    python scripts/create_super_admin.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import config
from db import create_db_and_tables, get_db_session
from exceptions.base import ShopException
from services.admin import AdminService


async def create_super_admin():
    if not config.SUPER_ADMIN_EMAIL or not config.SUPER_ADMIN_PASSWORD:
        print("❌ SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD must be set")
        sys.exit(1)

    await create_db_and_tables()
    async with get_db_session() as session:
        user, created = await AdminService.ensure_super_admin(
            config.SUPER_ADMIN_USERNAME, config.SUPER_ADMIN_EMAIL, config.SUPER_ADMIN_PASSWORD, session
        )

    if not created:
        print(f"ℹ️  Account already exists: {user.email} (role {user.role.value})")
        return
    print("✅ SUPER_ADMIN user created successfully:")
    print(f"   Username: {user.username}")
    print(f"   Email: {user.email}")
    print(f"   Role: {user.role.value}")
    print(f"   Status: {user.status.value}")
    print("\n⚠️  Change the default password in production!")


async def main():
    try:
        await create_super_admin()
    except ShopException as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
