"""Built-in store records used when STORE_DATA_PATH is not set."""

DEFAULT_STORE_DATA = {
    "products": [
        {"id": "P1001", "name": "Wireless Mouse", "price": 799, "stock": 45,
         "category": "electronics", "delivery_days": 2},
        {"id": "P1002", "name": "Mechanical Keyboard", "price": 2499, "stock": 23,
         "category": "electronics", "delivery_days": 3},
        {"id": "P1003", "name": "USB-C Cable", "price": 299, "stock": 120,
         "category": "accessories", "delivery_days": 1},
        {"id": "P1004", "name": "Laptop Stand", "price": 1499, "stock": 0,
         "category": "accessories", "delivery_days": 5},
        {"id": "P1005", "name": "Webcam HD", "price": 1899, "stock": 15,
         "category": "electronics", "delivery_days": 2},
        {"id": "P1006", "name": "Desk Lamp", "price": 999, "stock": 30,
         "category": "furniture", "delivery_days": 3},
    ],
    "orders": [
        {
            "id": "O9001",
            "customer_id": "C001",
            "status": "Delivered",
            "delivery_date": "2025-01-02",
            "items": [{"product_id": "P1001", "quantity": 1}],
            "total": 799,
            "order_date": "2024-12-28",
        },
        {
            "id": "O9002",
            "customer_id": "C001",
            "status": "Delayed",
            "delivery_date": "2025-01-05",
            "items": [{"product_id": "P1002", "quantity": 1}],
            "total": 2499,
            "issue": "Warehouse delay",
            "order_date": "2024-12-20",
        },
        {
            "id": "O9003",
            "customer_id": "C002",
            "status": "Processing",
            "delivery_date": "2025-01-03",
            "items": [{"product_id": "P1003", "quantity": 2}],
            "total": 598,
            "order_date": "2024-12-29",
        },
    ],
    "customers": [
        {"id": "C001", "name": "John Doe", "email": "john@example.com",
         "phone": "+91-9876543210"},
        {"id": "C002", "name": "Jane Smith", "email": "jane@example.com",
         "phone": "+91-9876543211"},
    ],
}
