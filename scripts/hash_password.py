"""Hash an admin password for the ADMIN_USERS setting.

Usage:
    python -m scripts.hash_password <username>

Prompts for the password and prints a JSON fragment to merge into the
``ADMIN_USERS`` environment variable.
"""

import getpass
import json
import sys

from api.services.auth import hash_password


def main() -> int:
    if len(sys.argv) != 2:
        print(__doc__)
        return 2
    username = sys.argv[1]
    password = getpass.getpass(f"Password for {username}: ")
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match.", file=sys.stderr)
        return 1
    print(json.dumps({username: hash_password(password)}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
