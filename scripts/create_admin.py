#!/usr/bin/env python3
"""
Create an admin account.

Admins cannot self-register, so the first one is created from the shell.

Usage:
    python scripts/create_admin.py admin@clinic.example
    python scripts/create_admin.py admin@clinic.example --password 's3cret!'

The password is prompted for when not given.
"""

import argparse
import asyncio
import getpass
import sys

import dotenv

dotenv.load_dotenv()


async def create_admin(email: str, password: str) -> int:
    """Insert the admin user; returns a process exit code."""
    from clinicdesk.core.roles import Role
    from clinicdesk.database import AsyncSessionLocal, engine
    from clinicdesk.services.user_service import UserService

    try:
        async with AsyncSessionLocal() as session:
            service = UserService(session)
            if await service.get_user_by_email(email):
                print(f"✗ {email} is already registered", file=sys.stderr)
                return 1

            user = await service.create_user(email, password, Role.ADMIN)
            await session.commit()
    finally:
        await engine.dispose()

    print(f"✓ Admin created: {user['email']} ({user['id']})")
    return 0


def main() -> int:
    """Parse arguments and create the account."""
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("email", help="Login email")
    parser.add_argument("--password", help="Password (prompted if omitted)")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("✗ Password must be at least 6 characters", file=sys.stderr)
        return 1

    return asyncio.run(create_admin(args.email, password))


if __name__ == "__main__":
    sys.exit(main())
