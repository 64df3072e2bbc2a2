"""Create a user (e.g. the first admin).

Usage:
    uv run python -m scripts.create_user <username> <name> [--role admin|manager|user] [--email EMAIL] [--password PASSWORD]
If --password is omitted, a random one is printed.
On SQLite the schema is created first.
"""

import argparse
import asyncio
import secrets
import sys
from pathlib import Path

from dotenv import load_dotenv

import app.infrastructure.persistence.database as database
from app.core.config import get_settings
from app.domain.enums import UserRole
from app.domain.exceptions import UserAlreadyExistsException
from app.infrastructure.persistence.repositories import UserRepository


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="create_user")
    parser.add_argument("username")
    parser.add_argument("name")
    parser.add_argument("--role", choices=UserRole.values(), default=UserRole.USER.value)
    parser.add_argument("--email", default=None)
    parser.add_argument("--password", default=None)
    return parser.parse_args(argv)


def _load_env() -> None:
    """Load .env from the project root so get_settings() works from any working directory."""
    load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)


async def main() -> None:
    """Create the user in one transaction."""
    args = _parse_args(sys.argv[1:])
    _load_env()
    settings = get_settings()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)
    if settings.database_url.startswith("sqlite"):
        await database.create_all()

    password = args.password or secrets.token_urlsafe(12)
    try:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                user = await UserRepository(session).create_user(
                    username=args.username,
                    name=args.name,
                    password=password,
                    email=args.email,
                    role=UserRole(args.role),
                )
    except UserAlreadyExistsException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)
    finally:
        await database.dispose_engine()

    print(f"Created user: {user.id} ({user.username}, {user.role.value})")
    if not args.password:
        print(f"Password: {password}")


if __name__ == "__main__":
    asyncio.run(main())
