#!/usr/bin/env python3
"""
Forum backend -- account provisioning CLI.

Self-registration through POST /api/v1/user/signup always creates nonadmin
accounts. Admin accounts are provisioned out of band with this tool, which
writes to the same database the API uses (DATABASE_URL).

Usage:
  python main.py create-user alice alice@example.com
  python main.py create-user root root@example.com --admin
  python main.py create-user bob bob@example.com --password-stdin < pw.txt

Environment variables:
  DATABASE_URL   SQLAlchemy URL of the forum database (default: ./forum.db)
  SECRET_KEY     Required unless DEBUG=true (settings are validated on start)
  BCRYPT_ROUNDS  bcrypt cost for the new password hash (default: 12)
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.models import Role
from auth.service import UserService
from auth.store import UserStore
from core.config import get_settings
from core.errors import SignUpRestrictedError


def _read_password(from_stdin: bool) -> str:
    """Read the password from stdin (first line) or prompt twice on the TTY."""
    if from_stdin:
        return sys.stdin.readline().rstrip("\n")
    first = getpass.getpass("  Password: ")
    second = getpass.getpass("  Repeat password: ")
    if first != second:
        print("  [!] Passwords do not match.")
        return ""
    return first


def create_user(args: argparse.Namespace) -> int:
    password = _read_password(args.password_stdin)
    if not password:
        print("  [!] A password is required.")
        return 1
    if len(password.encode("utf-8")) > 72:
        print("  [!] Password must be at most 72 bytes.")
        return 1

    store = UserStore(args.database_url or get_settings().database_url)
    try:
        user = UserService(store).signup(
            username=args.username,
            email=args.email,
            password=password,
            role=Role.ADMIN if args.admin else Role.NONADMIN,
            first_name=args.first_name,
            last_name=args.last_name,
        )
    except SignUpRestrictedError as exc:
        print(f"  [!] {exc.code}: {exc.message}")
        return 1
    finally:
        store.close()

    print(f"  Created {user.role.value} '{user.username}' ({user.uuid})")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="forum-admin",
        description="Provision forum accounts, including admins.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-user alice alice@example.com
  python main.py create-user root root@example.com --admin
        """,
    )
    parser.add_argument(
        "--database-url",
        metavar="URL",
        default=None,
        help="Override DATABASE_URL for this run",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create an account")
    create.add_argument("username")
    create.add_argument("email")
    create.add_argument("--admin", action="store_true", help="Give the account the admin role")
    create.add_argument("--first-name", default="", metavar="NAME")
    create.add_argument("--last-name", default="", metavar="NAME")
    create.add_argument(
        "--password-stdin",
        action="store_true",
        help="Read the password from the first line of stdin instead of prompting",
    )
    create.set_defaults(func=create_user)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
