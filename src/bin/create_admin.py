#!/usr/bin/env python3
"""
Create the first admin account.

Usage: python -m bin.create_admin [email] [password] [name]
"""

import sys

from bistro_shared.config import load_config
from bistro_shared.db import Database
from bistro_shared.errors import AppError
from bistro_shared.models import Base
from bistro_shared.services.user_service import UserService

DEFAULT_EMAIL = "admin@bistro.local"
DEFAULT_PASSWORD = "admin123"
DEFAULT_NAME = "Admin"


def create_admin(argv: list[str]) -> int:
    email = argv[0] if len(argv) > 0 else DEFAULT_EMAIL
    password = argv[1] if len(argv) > 1 else DEFAULT_PASSWORD
    name = argv[2] if len(argv) > 2 else DEFAULT_NAME

    config = load_config("bistro-script")
    db = Database(config.database_url)
    db.create_all(Base.metadata)

    try:
        admin = UserService(db).create_user(name, email, password, role="admin")
    except AppError as exc:
        print(f"❌ {exc.message}")
        return 1
    finally:
        db.dispose()

    print("✅ Admin user created successfully!")
    print(f"   Email: {admin['email']}")
    print(f"   Password: {password}")
    return 0


def main() -> None:
    sys.exit(create_admin(sys.argv[1:]))


if __name__ == "__main__":
    main()
