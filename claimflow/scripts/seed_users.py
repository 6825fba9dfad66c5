"""Create user accounts from the command line.

Usage:
    python -m claimflow.scripts.seed_users --name "Somchai P." --email somchai@example.com \
        --role INSURANCE --password secret
    python -m claimflow.scripts.seed_users --file users.json

The JSON file holds a list of objects with name, email, role, position,
employeeNumber and password keys.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from claimflow.core.database import async_session_maker, init_database
from claimflow.core.exceptions import ConflictError
from claimflow.schemas.enums import UserRole
from claimflow.schemas.users import UserCreate
from claimflow.services.user_service import UserService
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create claimflow user accounts")
    parser.add_argument("--file", type=Path, help="JSON file with a list of users")
    parser.add_argument("--name")
    parser.add_argument("--email")
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.USER.value)
    parser.add_argument("--position")
    parser.add_argument("--employee-number")
    parser.add_argument("--password")
    return parser


def load_payloads(args: argparse.Namespace) -> list[UserCreate]:
    if args.file:
        records = json.loads(args.file.read_text(encoding="utf-8"))
        return [UserCreate.model_validate(record) for record in records]
    if not args.name or not args.email:
        raise SystemExit("--name and --email are required unless --file is given")
    return [
        UserCreate(
            name=args.name,
            email=args.email,
            role=UserRole(args.role),
            position=args.position,
            employee_number=args.employee_number,
            password=args.password,
        )
    ]


async def seed(payloads: list[UserCreate]) -> int:
    """Create each user, skipping ones that already exist.

    Returns:
        Number of users created
    """
    await init_database(auto_migrate=True)
    created = 0
    async with async_session_maker() as session:
        service = UserService(session)
        for payload in payloads:
            try:
                user = await service.create_user(payload)
            except ConflictError:
                LOGGER.warning(f"Skipping existing user {payload.email}")
                continue
            created += 1
            print(f"created {user.role.value:<9} {user.email} ({user.id})")
    return created


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    payloads = load_payloads(args)
    created = asyncio.run(seed(payloads))
    LOGGER.info(f"Created {created} of {len(payloads)} users")
    return 0


if __name__ == "__main__":
    sys.exit(main())
