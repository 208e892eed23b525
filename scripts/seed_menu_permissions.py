"""
Seed default menus, staff roles, role access and login users for the hotel back office.

Usage (from repository root):

    uv run python scripts/seed_menu_permissions.py

Optional arguments let you override default passwords or skip user creation:

    uv run python scripts/seed_menu_permissions.py --admin-password S3cret --skip-default-users
"""

import argparse
import os
import sys

# Ensure src is on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from hotel_admin.db import SessionLocal  # noqa: E402
from hotel_admin.db.init_db import init_db  # noqa: E402
from hotel_admin.services.menu_permission_service import MenuPermissionStore  # noqa: E402
from hotel_admin.utils.auth import create_user  # noqa: E402

# username, role, default password
DEFAULT_USERS: tuple[tuple[str, str, str], ...] = (
    ("admin", "Admin", "admin123"),
    ("reservation", "Reservation Officer", "reservation123"),
    ("sales", "Sales Manager", "sales123"),
    ("frontoffice", "Front Office Manager", "frontoffice123"),
)


def seed(default_passwords: dict[str, str], skip_users: bool = False) -> dict[str, int]:
    init_db()
    session = SessionLocal()
    try:
        counts = MenuPermissionStore(session).seed_defaults()

        if not skip_users:
            for username, role_name, default_password in DEFAULT_USERS:
                password = default_passwords.get(username, default_password)
                create_user(session, username, password, role_name=role_name)
        return counts
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed default menus, roles and menu permissions.")
    for username, role_name, _ in DEFAULT_USERS:
        parser.add_argument(f"--{username}-password", help=f"Password for seeded '{username}' user ({role_name}).")
    parser.add_argument(
        "--skip-default-users",
        action="store_true",
        help="Only create menus, roles and grants; skip creating default users.",
    )
    return parser


def main():
    args = build_parser().parse_args()
    password_overrides = {
        username: value
        for username, _, _ in DEFAULT_USERS
        if (value := getattr(args, f"{username}_password"))
    }
    counts = seed(password_overrides, skip_users=args.skip_default_users)
    print(f"Seed completed: {counts['menus']} menus, {counts['roles']} roles, {counts['grants']} grants created.")


if __name__ == "__main__":
    main()
