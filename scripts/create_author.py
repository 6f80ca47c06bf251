#!/usr/bin/env python3
"""
Create Author Script.

Creates an author directly in the database and prints an access token for
the admin endpoints.

Usage:
    python scripts/create_author.py --name "Ana Lima" --email ana@example.com
    python scripts/create_author.py --email ana@example.com --token-only

Environment Variables:
    AUTHOR_NAME: Display name (default: Admin)
    AUTHOR_EMAIL: Email address (default: admin@example.com)
"""

from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter
from asyncio import run as asyncio_run
from datetime import timedelta
from os import environ
from sys import exit as sys_exit

from press.db import transaction
from press.errors import DatabaseError
from press.managers.token_manager import create_access_token
from press.models import UserDB
from press.repositories import UserRepository


def parse_args() -> Namespace:
    """
    Parse command line arguments.

    Returns
    -------
    Namespace
        Parsed arguments.
    """
    parser = ArgumentParser(
        description="Create a blog author and print an access token.",
        formatter_class=RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--name", default=environ.get("AUTHOR_NAME", "Admin"))
    parser.add_argument("--email", default=environ.get("AUTHOR_EMAIL", "admin@example.com"))
    parser.add_argument(
        "--expires-minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (default: ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    parser.add_argument(
        "--token-only",
        action="store_true",
        help="Only issue a token for an existing author",
    )
    return parser.parse_args()


async def get_or_create_author(name: str, email: str, *, create: bool) -> UserDB | None:
    """
    Return the author with `email`, creating it when allowed.

    Parameters
    ----------
    name : str
        Display name for a new author.
    email : str
        Author email.
    create : bool
        Whether a missing author should be created.

    Returns
    -------
    UserDB | None
        The author, or None if missing and `create` is False.
    """
    async with transaction() as session:
        users = UserRepository(session)
        if author := await users.get_by_email(email):
            return author
        if not create:
            return None
        return await users.create(name=name, email=email)


def main() -> int:
    args = parse_args()

    try:
        author = asyncio_run(
            get_or_create_author(args.name, args.email, create=not args.token_only),
        )
    except DatabaseError as e:
        print(f"❌ {e.detail}")
        return 1

    if author is None or author.id is None:
        print(f"❌ No author with email {args.email}")
        return 1

    expires = timedelta(minutes=args.expires_minutes) if args.expires_minutes else None
    token = create_access_token(author.id, expires_delta=expires)

    print("=" * 60)
    print(f"Author:  {author.name} <{author.email}> (id {author.id})")
    print("-" * 60)
    print(f"Access token:\n{token}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys_exit(main())
