#!/usr/bin/env python3
"""
Script to provision a SafeKey account from the command line.

Usage:
    python scripts/create_user.py --email alice@example.com --password "s3cret-pass"
    python scripts/create_user.py --email alice@example.com --password "s3cret-pass" --full-name "Alice"
"""

import asyncio
import argparse
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from app.database import session_scope, init_db, close_db
from app.core.exceptions import EmailAlreadyRegisteredException
from app.services.user_service import UserService


async def main():
    """Main function."""
    parser = argparse.ArgumentParser(
        description="Create a SafeKey user account"
    )
    parser.add_argument(
        "--email",
        required=True,
        help="Account email (required)"
    )
    parser.add_argument(
        "--password",
        required=True,
        help=f"Account password, at least {settings.PASSWORD_MIN_LENGTH} characters (required)"
    )
    parser.add_argument(
        "--full-name",
        default=None,
        help="Display name (optional)"
    )

    args = parser.parse_args()

    if len(args.password) < settings.PASSWORD_MIN_LENGTH:
        print(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters", file=sys.stderr)
        sys.exit(2)

    await init_db()

    try:
        async with session_scope() as session:
            user = await UserService.create_user(
                session,
                email=args.email,
                password=args.password,
                full_name=args.full_name
            )
    except EmailAlreadyRegisteredException as e:
        print(f"Error: {e.detail}", file=sys.stderr)
        sys.exit(1)
    finally:
        await close_db()

    print("\n" + "=" * 50)
    print("USER CREATED SUCCESSFULLY")
    print("=" * 50)
    print(f"ID: {user.id}")
    print(f"Email: {user.email}")
    if user.full_name:
        print(f"Name: {user.full_name}")
    print("=" * 50 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
