"""Toggle one role's visibility of a menu item on a running back-office API.

Usage (from repository root):
python scripts/toggle_permission.py --role "Sales Manager" --menu room-type --token <admin JWT>

The cascade is planned locally against the remote menu tree and permission rows, then each
write is sent through the remote single-permission endpoint.
"""

import argparse
import asyncio
import os
import sys

# Ensure src is on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from hotel_admin.dependencies.permission_store import get_permission_store_client  # noqa: E402
from hotel_admin.external_services.permission_store_client import (  # noqa: E402
    PermissionStoreError,
    close_shared_clients,
)
from hotel_admin.services.menu_tree import build_tree  # noqa: E402
from hotel_admin.services.permission_cascade import PermissionMatrix, plan_toggle, toggle_permission  # noqa: E402


async def run(role_name: str, menu_id: str, base_url: str | None, token: str | None, dry_run: bool) -> int:
    client = get_permission_store_client(base_url=base_url, token=token)
    try:
        tree = build_tree(await client.fetch_menu_items())
        matrix = PermissionMatrix.from_entries(await client.fetch_permission_entries())
        current_value = matrix.can_view(menu_id, role_name)

        if dry_run:
            for write in plan_toggle(tree, matrix, menu_id, role_name, current_value):
                print(f"would write {write.describe()}")
            return 0

        outcome = await toggle_permission(tree, matrix, menu_id, role_name, current_value, client.write_one)
        for write in outcome.result.succeeded:
            print(f"ok      {write.describe()}")
        for failure in outcome.result.failed:
            print(f"FAILED  {failure.write.describe()}: {failure.error}")
        print(outcome.message)
        return 0 if outcome.ok else 1
    except PermissionStoreError as e:
        print(f"Permission store error: {e}")
        return 2
    finally:
        await close_shared_clients()


def main() -> None:
    parser = argparse.ArgumentParser(description="Toggle a menu permission with parent/child cascade.")
    parser.add_argument("--role", required=True, help="Role name, e.g. 'Sales Manager'")
    parser.add_argument("--menu", required=True, help="Menu id, e.g. 'room-type'")
    parser.add_argument("--base-url", help="Overrides PERMISSION_STORE_BASE_URL")
    parser.add_argument("--token", help="Admin bearer token; overrides PERMISSION_STORE_TOKEN")
    parser.add_argument("--dry-run", action="store_true", help="Only print the planned writes")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args.role, args.menu, args.base_url, args.token, args.dry_run)))


if __name__ == "__main__":
    main()
