"""Create a back-office user in the application's database.

Usage (from repository root):
python scripts/create_user.py --username frontdesk01 --password secret --role "Reservation Officer"

This script ensures the project's `src` directory is on sys.path so the
local `hotel_admin` package can be imported. It calls `init_db()` to prepare the DB
and then creates/updates a user with `create_user`.
"""

import argparse
import os
import sys
from getpass import getpass

# Ensure src is on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from hotel_admin.db import SessionLocal  # noqa: E402
from hotel_admin.db.init_db import init_db  # noqa: E402
from hotel_admin.services.menu_permission_service import MenuPermissionStore  # noqa: E402
from hotel_admin.utils.auth import create_user  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--username", required=False)
    parser.add_argument("--password", required=False)
    parser.add_argument("--role", default="Reservation Officer", help="Staff role name, e.g. 'Sales Manager' or 'Admin'")
    parser.add_argument("--full-name", default=None)
    args = parser.parse_args()

    username = args.username or input("username: ")
    password = args.password or getpass("password: ")

    # initialize DB (creates tables if needed)
    init_db()

    db = SessionLocal()
    try:
        if not MenuPermissionStore(db).role_exists(args.role):
            print(f"Warning: role '{args.role}' is not registered; run scripts/seed_menu_permissions.py first.")
        user = create_user(db, username, password, role_name=args.role, full_name=args.full_name)
        print(f"Created/updated user: {user.username} (role={user.role_name})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
