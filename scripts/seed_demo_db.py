"""Script to create a demo SQLite database for trying out the MCP server."""

import os
import random
import sqlite3
from datetime import datetime, timedelta

from faker import Faker

fake = Faker()
Faker.seed(7)
random.seed(7)

DB_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")
DB_PATH = os.environ.get("DATABASE_PATH", os.path.join(DB_DIR, "app.db"))

NUM_CUSTOMERS = 200
NUM_PRODUCTS = 40
NUM_ORDERS = 600

CATEGORIES = ["Hardware", "Software", "Services", "Accessories"]


def create_tables(conn: sqlite3.Connection) -> None:
    """Create the demo tables."""
    conn.executescript("""
        DROP TABLE IF EXISTS orders;
        DROP TABLE IF EXISTS products;
        DROP TABLE IF EXISTS customers;

        CREATE TABLE customers (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT,
            country TEXT NOT NULL
        );

        CREATE TABLE products (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            category TEXT NOT NULL,
            price REAL NOT NULL
        );

        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER NOT NULL,
            product_id INTEGER NOT NULL,
            quantity INTEGER NOT NULL,
            order_date TEXT NOT NULL,
            FOREIGN KEY (customer_id) REFERENCES customers(id),
            FOREIGN KEY (product_id) REFERENCES products(id)
        );

        CREATE INDEX idx_orders_customer ON orders(customer_id);
    """)
    conn.commit()


def populate(conn: sqlite3.Connection) -> None:
    """Insert customers, products and orders."""
    customers = [
        # Some customers have no email so NULL handling shows up in results
        (i, fake.name(), fake.email() if random.random() > 0.1 else None, fake.country())
        for i in range(1, NUM_CUSTOMERS + 1)
    ]
    products = [
        (i, fake.catch_phrase(), random.choice(CATEGORIES), round(random.uniform(4.99, 1499.99), 2))
        for i in range(1, NUM_PRODUCTS + 1)
    ]

    start_date = datetime(2025, 1, 1)
    orders = [
        (
            i,
            random.randint(1, NUM_CUSTOMERS),
            random.randint(1, NUM_PRODUCTS),
            random.randint(1, 10),
            (start_date + timedelta(days=random.randint(0, 364))).strftime("%Y-%m-%d"),
        )
        for i in range(1, NUM_ORDERS + 1)
    ]

    conn.executemany("INSERT INTO customers (id, name, email, country) VALUES (?, ?, ?, ?)", customers)
    conn.executemany("INSERT INTO products (id, name, category, price) VALUES (?, ?, ?, ?)", products)
    conn.executemany(
        "INSERT INTO orders (id, customer_id, product_id, quantity, order_date) VALUES (?, ?, ?, ?, ?)",
        orders,
    )
    conn.commit()
    print(f"  ✓ Inserted {len(customers)} customers, {len(products)} products, {len(orders)} orders")


def main() -> None:
    """Create and populate the demo database."""
    os.makedirs(os.path.dirname(os.path.abspath(DB_PATH)), exist_ok=True)

    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)

    print(f"Creating database at: {DB_PATH}")
    conn = sqlite3.connect(DB_PATH)
    try:
        create_tables(conn)
        populate(conn)
        print(f"\n✅ Database created successfully at: {DB_PATH}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
