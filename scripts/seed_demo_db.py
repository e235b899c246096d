"""Build a demo SQLite retail database for local development.

Usage:
    python scripts/seed_demo_db.py [--path data/retail.db] [--seed 7]
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import aiosqlite

# Add src to path (matching the other scripts)
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from retail_assistant.config.settings import Settings

SCHEMA = """
CREATE TABLE stores (
    store_id TEXT PRIMARY KEY,
    store_name TEXT NOT NULL,
    city TEXT NOT NULL,
    store_type TEXT NOT NULL
);
CREATE TABLE products (
    product_id TEXT PRIMARY KEY,
    product_name TEXT NOT NULL,
    category TEXT NOT NULL,
    brand TEXT NOT NULL,
    cost_price REAL NOT NULL,
    retail_price REAL NOT NULL,
    stock_level INTEGER NOT NULL,
    reorder_point INTEGER NOT NULL
);
CREATE TABLE customers (
    customer_id TEXT PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    registration_date DATE NOT NULL,
    loyalty_tier TEXT NOT NULL,
    total_lifetime_value REAL NOT NULL
);
CREATE TABLE sales (
    sale_id TEXT PRIMARY KEY,
    product_id TEXT NOT NULL REFERENCES products(product_id),
    customer_id TEXT REFERENCES customers(customer_id),
    store_id TEXT NOT NULL REFERENCES stores(store_id),
    sale_date DATE NOT NULL,
    quantity INTEGER NOT NULL,
    unit_price REAL NOT NULL,
    total_amount REAL NOT NULL,
    discount_amount REAL,
    payment_method TEXT NOT NULL
);
CREATE TABLE order_items (
    id INTEGER PRIMARY KEY,
    sale_id TEXT NOT NULL REFERENCES sales(sale_id),
    product_id TEXT NOT NULL REFERENCES products(product_id),
    sale_price REAL NOT NULL,
    status TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL
);
"""

CATEGORIES = {
    "Bags": ["Leather Tote", "Weekend Duffel", "Crossbody Mini"],
    "Shoes": ["Trail Runner", "Suede Loafer", "Canvas Sneaker"],
    "Shirts": ["Oxford Shirt", "Linen Camp Shirt", "Pique Polo"],
    "Accessories": ["Wool Scarf", "Leather Belt", "Silk Tie"],
}
BRANDS = ["Northwind", "Harbor & Co", "Atelier Nine"]
STORES = [
    ("S1", "Downtown Flagship", "Chicago", "flagship"),
    ("S2", "Lakeside Outlet", "Milwaukee", "outlet"),
    ("S3", "Mall Boutique", "Denver", "boutique"),
    ("S4", "Online Store", "Online", "online"),
]
FIRST_NAMES = ["Avery", "Jordan", "Riley", "Casey", "Morgan", "Quinn", "Taylor", "Rowan"]
LAST_NAMES = ["Lee", "Patel", "Garcia", "Kim", "Nguyen", "Smith", "Okafor", "Rossi"]
TIERS = ["Bronze", "Silver", "Gold", "Platinum"]
PAYMENTS = ["card", "cash", "mobile"]
STATUSES = ["Complete", "Complete", "Complete", "Shipped", "Returned"]


def _timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


async def seed(path: str, seed_value: int, sales_count: int) -> None:
    rng = random.Random(seed_value)
    now = datetime.now(timezone.utc)

    db_path = Path(path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.unlink(missing_ok=True)

    products = []
    for category, names in CATEGORIES.items():
        for name in names:
            cost = round(rng.uniform(10, 120), 2)
            products.append((
                f"P{len(products) + 1:03d}",
                name,
                category,
                rng.choice(BRANDS),
                cost,
                round(cost * rng.uniform(1.6, 2.8), 2),
                rng.randint(0, 400),
                rng.choice([20, 40, 60]),
            ))

    customers = []
    for i in range(60):
        registered = now - timedelta(days=rng.randint(30, 900))
        customers.append((
            f"C{i + 1:04d}",
            rng.choice(FIRST_NAMES),
            rng.choice(LAST_NAMES),
            registered.date().isoformat(),
            rng.choice(TIERS),
            round(rng.uniform(50, 5000), 2),
        ))

    sales = []
    order_items = []
    for i in range(sales_count):
        product = rng.choice(products)
        quantity = rng.randint(1, 4)
        discount = round(product[5] * quantity * rng.choice([0, 0, 0.1, 0.2]), 2)
        sold_at = now - timedelta(days=rng.uniform(0, 180))
        sale_id = f"T{i + 1:05d}"
        sales.append((
            sale_id,
            product[0],
            rng.choice(customers)[0] if rng.random() > 0.1 else None,
            rng.choice(STORES)[0],
            sold_at.date().isoformat(),
            quantity,
            product[5],
            round(product[5] * quantity - discount, 2),
            discount or None,
            rng.choice(PAYMENTS),
        ))
        for _ in range(quantity):
            order_items.append((
                sale_id,
                product[0],
                round(product[5] * rng.uniform(0.8, 1.0), 2),
                rng.choice(STATUSES),
                _timestamp(sold_at),
            ))

    async with aiosqlite.connect(db_path) as db:
        await db.executescript(SCHEMA)
        await db.executemany("INSERT INTO stores VALUES (?, ?, ?, ?)", STORES)
        await db.executemany("INSERT INTO products VALUES (?, ?, ?, ?, ?, ?, ?, ?)", products)
        await db.executemany("INSERT INTO customers VALUES (?, ?, ?, ?, ?, ?)", customers)
        await db.executemany(
            "INSERT INTO sales VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)", sales
        )
        await db.executemany(
            "INSERT INTO order_items (sale_id, product_id, sale_price, status, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            order_items,
        )
        await db.commit()

    print(f"Seeded {db_path}")
    print(f"  stores:      {len(STORES)}")
    print(f"  products:    {len(products)}")
    print(f"  customers:   {len(customers)}")
    print(f"  sales:       {len(sales)}")
    print(f"  order_items: {len(order_items)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Build the demo retail SQLite database")
    parser.add_argument("--path", default=Settings().sqlite_db_path)
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--sales", type=int, default=2000)
    args = parser.parse_args()
    asyncio.run(seed(args.path, args.seed, args.sales))


if __name__ == "__main__":
    main()
