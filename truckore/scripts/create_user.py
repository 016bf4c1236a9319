"""
Create a user from the command line (e.g. recover a lost super admin). Run from project root:
  python -m truckore.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m truckore.scripts.create_user admin 'Your-Secure-Pass1' super_admin
"""
import argparse
import asyncio
import sys

from truckore.container import build_container
from truckore.core.config import get_settings
from truckore.core.errors import DuplicateUsername, ProtectedAccount, ValidationError


async def _create(username: str, password: str, role: str, email: str | None) -> int:
    container = build_container(get_settings())
    try:
        await container.initialize()
        try:
            user = await container.users.create_user(username, password, role, email)
        except (DuplicateUsername, ProtectedAccount, ValidationError) as e:
            print(e.message, file=sys.stderr)
            return 1
        if role == "super_admin" and not await container.setup.check_setup_status():
            await container.setup.mark_setup_completed()
            await container.audit_log.record("SETUP_COMPLETED", user.id, "Super admin created from CLI")
        print(f"Created user '{user.username}' with role '{user.role}'.")
        return 0
    finally:
        container.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Truckore Pro user.")
    parser.add_argument("username", help="Username (3-255 chars)")
    parser.add_argument("password", help="Password (8-128 chars, mixed case, digit, special)")
    parser.add_argument(
        "role", nargs="?", default="operator", choices=["operator", "admin", "super_admin"]
    )
    parser.add_argument("--email", default=None, help="Optional email address")
    args = parser.parse_args()
    return asyncio.run(_create(args.username, args.password, args.role, args.email))


if __name__ == "__main__":
    sys.exit(main())
