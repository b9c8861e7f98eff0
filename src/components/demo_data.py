"""Fixed demo dataset: customers, orders and products"""
from typing import Dict, List, Tuple

DEMO_TABLE_DDL: Dict[str, str] = {
    "customers": (
        "CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT, email TEXT, "
        "country TEXT, joined_at DATE)"
    ),
    "orders": (
        "CREATE TABLE orders (id INTEGER PRIMARY KEY, customer_id INTEGER, "
        "amount DECIMAL, status TEXT, order_date DATE)"
    ),
    "products": (
        "CREATE TABLE products (id INTEGER PRIMARY KEY, name TEXT, category TEXT, "
        "price DECIMAL, stock INTEGER)"
    ),
}

# Column order matches the DDL above
DEMO_COLUMNS: Dict[str, List[Tuple[str, str]]] = {
    "customers": [
        ("id", "INTEGER"),
        ("name", "TEXT"),
        ("email", "TEXT"),
        ("country", "TEXT"),  # country code, e.g. US, UK, CA
        ("joined_at", "DATE"),
    ],
    "orders": [
        ("id", "INTEGER"),
        ("customer_id", "INTEGER"),
        ("amount", "DECIMAL"),  # USD
        ("status", "TEXT"),  # pending, shipped, delivered, cancelled
        ("order_date", "DATE"),
    ],
    "products": [
        ("id", "INTEGER"),
        ("name", "TEXT"),
        ("category", "TEXT"),
        ("price", "DECIMAL"),
        ("stock", "INTEGER"),
    ],
}

DEMO_CUSTOMERS = [
    {"id": 1, "name": "Alice Johnson", "email": "alice@example.com", "country": "US", "joined_at": "2023-01-15"},
    {"id": 2, "name": "Bob Smith", "email": "bob@example.com", "country": "UK", "joined_at": "2023-02-20"},
    {"id": 3, "name": "Charlie Davis", "email": "charlie@data.com", "country": "CA", "joined_at": "2023-03-10"},
    {"id": 4, "name": "Diana Prince", "email": "diana@themyscira.net", "country": "GR", "joined_at": "2023-05-01"},
    {"id": 5, "name": "Evan Wright", "email": "evan@tech.io", "country": "US", "joined_at": "2023-06-15"},
]

DEMO_ORDERS = [
    {"id": 101, "customer_id": 1, "amount": 120.50, "status": "delivered", "order_date": "2024-01-10"},
    {"id": 102, "customer_id": 2, "amount": 450.00, "status": "shipped", "order_date": "2024-01-12"},
    {"id": 103, "customer_id": 1, "amount": 60.00, "status": "delivered", "order_date": "2024-01-15"},
    {"id": 104, "customer_id": 3, "amount": 1200.99, "status": "pending", "order_date": "2024-02-01"},
    {"id": 105, "customer_id": 4, "amount": 35.00, "status": "cancelled", "order_date": "2024-02-05"},
    {"id": 106, "customer_id": 5, "amount": 210.25, "status": "delivered", "order_date": "2024-02-10"},
]

DEMO_PRODUCTS = [
    {"id": 1, "name": "Laptop Pro", "category": "Electronics", "price": 1200.00, "stock": 50},
    {"id": 2, "name": "Wireless Mouse", "category": "Electronics", "price": 25.50, "stock": 200},
    {"id": 3, "name": "Ergonomic Chair", "category": "Furniture", "price": 350.00, "stock": 15},
    {"id": 4, "name": "Coffee Maker", "category": "Appliances", "price": 85.00, "stock": 40},
    {"id": 5, "name": "Desk Lamp", "category": "Furniture", "price": 45.00, "stock": 100},
]

DEMO_ROWS: Dict[str, List[dict]] = {
    "customers": DEMO_CUSTOMERS,
    "orders": DEMO_ORDERS,
    "products": DEMO_PRODUCTS,
}
