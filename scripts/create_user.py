#!/usr/bin/env python3
"""
Script to create a new account interactively.

Usage:
    # From host (via Docker):
    docker compose exec -it api python scripts/create_user.py

    # Or with email as argument:
    docker compose exec -it api python scripts/create_user.py jane@example.com --first-name Jane --last-name Doe
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from virtualdoc.errors import AppError
from virtualdoc.services import create_services


def main():
    parser = argparse.ArgumentParser(description="Create a new account")
    parser.add_argument("email", nargs="?", help="Email address (e.g., jane@example.com)")
    parser.add_argument("--first-name", "-f", help="Given name")
    parser.add_argument("--last-name", "-l", help="Family name")
    args = parser.parse_args()

    services = create_services()

    email = args.email
    if not email:
        email = input("Email: ").strip()

    first_name = args.first_name
    if not first_name:
        first_name = input("First name: ").strip()

    last_name = args.last_name
    if not last_name:
        last_name = input("Last name: ").strip()

    password = getpass.getpass("Enter password: ")
    confirm = getpass.getpass("Confirm password: ")

    try:
        result = services.account_service.sign_up({
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password,
            "confirmPassword": confirm,
        })
    except AppError as e:
        print(f"❌ Failed to create account: {e.message}")
        sys.exit(1)

    account = result.account
    print()
    print("✅ Account created successfully!")
    print(f"   Email: {account.email}")
    print(f"   Account ID: {account.account_id}")
    print(f"   Name: {account.first_name} {account.last_name}")


if __name__ == "__main__":
    main()
