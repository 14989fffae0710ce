"""Utility script to create an administrator account in the database."""

from __future__ import annotations

import argparse
from getpass import getpass

from app.application.use_cases.users import create_user
from app.domain.entities import ADMIN_ROLE_ALIAS, UserType
from app.domain.exceptions import TransactionFailure, ValidationError
from app.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for administrator creation."""

    parser = argparse.ArgumentParser(
        description="Create an administrator able to author and send announcements.",
    )
    parser.add_argument(
        "--name",
        default="Administrator",
        help="Account name (default: Administrator)",
    )
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Login email (default: admin@example.com)",
    )
    parser.add_argument(
        "--real-name",
        default=None,
        help="Name shown as the author of announcements (optional)",
    )
    parser.add_argument(
        "--user-type",
        choices=[member.value for member in UserType],
        default=UserType.VETERINARIAN.value,
        help="Profile type attached to the account",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Account password. Prompted interactively when omitted.",
    )
    return parser.parse_args()


def main() -> None:
    """Create an administrator using the provided command line arguments."""

    args = parse_args()

    password = args.password or getpass("Administrator password: ")
    if not password:
        raise SystemExit("A password is required.")

    initialize_database()

    session = SessionLocal()
    try:
        user = create_user(
            session,
            name=args.name,
            email=args.email,
            password=password,
            user_type=UserType(args.user_type),
            role_alias=ADMIN_ROLE_ALIAS,
            real_name=args.real_name,
        )
    except ValidationError as exc:
        raise SystemExit(f"Could not create the administrator: {exc}") from exc
    except TransactionFailure as exc:
        raise SystemExit(f"Could not save the administrator: {exc}") from exc
    else:
        print(
            "Administrator created:\n"
            f"  ID: {user.id}\n"
            f"  Name: {user.name}\n"
            f"  Email: {user.email}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
