#!/usr/bin/env python3
"""
sessiongate -- operator command line.

Usage:
  python main.py create-user admin --role admin
  python main.py create-user alice
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 5050 --reload

Signup over HTTP never assigns a role, so create-user is how role-bearing
accounts (e.g. admins) come into existence. The password is always read
interactively and never accepted on the command line, where it would land
in shell history.

Environment variables: see core/config.py (SECRET_KEY, DATABASE_URL,
BCRYPT_ROUNDS, ...).
"""

from __future__ import annotations

import argparse
from getpass import getpass

from auth.errors import HashingError, UserConflict
from auth.passwords import PasswordHasher
from auth.store import DEFAULT_DB_URL, SQLUserDirectory
from core.config import get_settings


def create_user(username: str, role: str | None, users: SQLUserDirectory, hasher: PasswordHasher) -> int:
    """Prompt for a password twice and insert the user. Returns a process exit code."""
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        print("  [!] Passwords do not match.")
        return 1
    try:
        password_hash = hasher.hash(pw1)
    except HashingError as exc:
        print(f"  [!] Could not hash password: {exc}")
        return 1
    try:
        users.insert(username, password_hash, role=role)
    except UserConflict:
        print(f"  [!] User '{username}' already exists.")
        return 1
    print(f"  Created user '{username}'" + (f" with role '{role}'." if role else "."))
    return 0


def serve(host: str, port: int, reload: bool) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=host, port=port, reload=reload)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sessiongate",
        description="Credential login, server-side sessions and role gates.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-user admin --role admin
  python main.py serve --port 5050
        """,
    )
    sub = parser.add_subparsers(dest="command")

    p_create = sub.add_parser("create-user", help="Create a user (prompts for the password)")
    p_create.add_argument("username", help="Unique, case-sensitive username")
    p_create.add_argument("--role", default=None, help="Role tag, e.g. admin (default: none)")

    p_serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=5050)
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    args = parser.parse_args(argv)

    if args.command == "create-user":
        settings = get_settings()
        users = SQLUserDirectory(db_url=settings.database_url or DEFAULT_DB_URL)
        try:
            return create_user(args.username, args.role, users, PasswordHasher(rounds=settings.bcrypt_rounds))
        finally:
            users.close()

    if args.command == "serve":
        return serve(args.host, args.port, args.reload)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
