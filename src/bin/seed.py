#!/usr/bin/env python3
"""
Load demo data: staff accounts, a menu and twelve tables.

Existing users, menu items and tables are removed first. Orders are kept.
"""

import sys
from decimal import Decimal

from sqlalchemy import delete

from bistro_shared.config import load_config
from bistro_shared.constants import Roles, TableStatus
from bistro_shared.db import Database
from bistro_shared.models import Base, MenuItem, RestaurantTable, User

STAFF = [
    ("Admin", "admin@bistro.local", "admin123", Roles.ADMIN),
    ("John Waiter", "waiter@bistro.local", "waiter123", Roles.WAITER),
    ("Chef Mario", "kitchen@bistro.local", "kitchen123", Roles.KITCHEN),
    ("Carla Cashier", "cashier@bistro.local", "cashier123", Roles.CASHIER),
]

MENU = [
    ("Caesar Salad", "Fresh romaine lettuce with caesar dressing", "12.99", "Appetizers"),
    ("Bruschetta", "Toasted bread with tomatoes and basil", "9.99", "Appetizers"),
    ("Mozzarella Sticks", "Crispy mozzarella with marinara sauce", "10.99", "Appetizers"),
    ("Grilled Salmon", "Fresh salmon with lemon butter sauce", "24.99", "Main Course"),
    ("Ribeye Steak", "12oz ribeye with mashed potatoes", "32.99", "Main Course"),
    ("Chicken Parmesan", "Breaded chicken with marinara and mozzarella", "18.99", "Main Course"),
    ("Pasta Carbonara", "Creamy pasta with bacon and parmesan", "16.99", "Main Course"),
    ("Margherita Pizza", "Classic pizza with tomato and mozzarella", "14.99", "Main Course"),
    ("Chocolate Lava Cake", "Warm chocolate cake with vanilla ice cream", "8.99", "Desserts"),
    ("Tiramisu", "Classic Italian dessert", "7.99", "Desserts"),
    ("Cheesecake", "New York style cheesecake", "8.99", "Desserts"),
    ("Coca Cola", "Classic soft drink", "2.99", "Beverages"),
    ("Fresh Orange Juice", "Freshly squeezed orange juice", "4.99", "Beverages"),
    ("Coffee", "Freshly brewed coffee", "3.99", "Beverages"),
    ("Iced Tea", "Refreshing iced tea", "2.99", "Beverages"),
]

TABLE_COUNT = 12


def _capacity(number: int) -> int:
    if number <= 4:
        return 2
    if number <= 8:
        return 4
    return 6


def seed(db: Database) -> None:
    with db.session() as session:
        session.execute(delete(User))
        session.execute(delete(MenuItem))
        session.execute(delete(RestaurantTable))
        print("🗑️  Cleared existing users, menu items and tables")

        for name, email, password, role in STAFF:
            user = User(name=name, role=role.value, is_active=True)
            user.set_email(email)
            user.set_password(password)
            session.add(user)
        print(f"👥 Created {len(STAFF)} staff accounts")

        for name, description, price, category in MENU:
            session.add(
                MenuItem(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    category=category,
                    is_available=True,
                )
            )
        print(f"🍽️  Created {len(MENU)} menu items")

        for number in range(1, TABLE_COUNT + 1):
            session.add(
                RestaurantTable(
                    number=number, capacity=_capacity(number), status=TableStatus.FREE.value
                )
            )
        print(f"🪑 Created {TABLE_COUNT} tables")


def main() -> None:
    config = load_config("bistro-script")
    db = Database(config.database_url)
    db.create_all(Base.metadata)
    try:
        seed(db)
    finally:
        db.dispose()

    print("\n✅ Database seeded successfully!")
    print("\n📝 Login credentials:")
    for name, email, password, role in STAFF:
        print(f"   {role.value:<8} {email} / {password}")
    sys.exit(0)


if __name__ == "__main__":
    main()
