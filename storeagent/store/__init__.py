"""
Store Knowledge Base
====================

Read-only records the tools answer from: products, orders and customers.

The catalog is loaded once at startup, either from the built-in seed data
or from a JSON file with the same shape:

    {
        "products": [{"id": "P1001", "name": "...", "price": 799, ...}],
        "orders": [{"id": "O9001", "customer_id": "C001", "items": [...], ...}],
        "customers": [{"id": "C001", "name": "...", ...}]
    }

Identifiers are matched case-insensitively.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from storeagent.utils.logger import Logger

logger = Logger("Store")


def normalize_id(value: str) -> str:
    """Canonical form of a record identifier ("o9001 " -> "O9001")."""
    return value.strip().upper()


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    stock: int
    category: str
    delivery_days: int

    @property
    def available(self) -> bool:
        return self.stock > 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class Order:
    id: str
    customer_id: str
    status: str
    order_date: str        # YYYY-MM-DD
    delivery_date: str     # YYYY-MM-DD
    items: tuple[OrderItem, ...]
    total: float
    issue: str | None = None


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str
    phone: str


@dataclass
class Catalog:
    """
    In-memory store of products, orders and customers.

    Example:
        catalog = Catalog.from_json(Path("store.json"))
        product = catalog.find_product("p1001")
        matches = catalog.search_products("accessories")
    """
    products: list[Product] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)
    customers: list[Customer] = field(default_factory=list)

    def find_product(self, product_id: str) -> Product | None:
        key = normalize_id(product_id)
        return next((p for p in self.products if p.id == key), None)

    def find_order(self, order_id: str) -> Order | None:
        key = normalize_id(order_id)
        return next((o for o in self.orders if o.id == key), None)

    def find_customer(self, customer_id: str) -> Customer | None:
        key = normalize_id(customer_id)
        return next((c for c in self.customers if c.id == key), None)

    def search_products(self, query: str) -> list[Product]:
        """Products whose name or category contains the query (case-insensitive)."""
        needle = query.strip().lower()
        return [
            p for p in self.products
            if needle in p.name.lower() or needle in p.category.lower()
        ]

    @classmethod
    def from_dict(cls, data: dict) -> "Catalog":
        """
        Build a catalog from plain records.

        Raises:
            ValueError: If a record is missing a field
        """
        try:
            products = [
                Product(
                    id=normalize_id(p["id"]),
                    name=p["name"],
                    price=p["price"],
                    stock=p["stock"],
                    category=p["category"],
                    delivery_days=p["delivery_days"],
                )
                for p in data.get("products", [])
            ]
            orders = [
                Order(
                    id=normalize_id(o["id"]),
                    customer_id=normalize_id(o["customer_id"]),
                    status=o["status"],
                    order_date=o["order_date"],
                    delivery_date=o["delivery_date"],
                    items=tuple(
                        OrderItem(
                            product_id=normalize_id(i["product_id"]),
                            quantity=i["quantity"],
                        )
                        for i in o.get("items", [])
                    ),
                    total=o["total"],
                    issue=o.get("issue"),
                )
                for o in data.get("orders", [])
            ]
            customers = [
                Customer(
                    id=normalize_id(c["id"]),
                    name=c["name"],
                    email=c["email"],
                    phone=c["phone"],
                )
                for c in data.get("customers", [])
            ]
        except KeyError as e:
            raise ValueError(f"Store record is missing field {e}") from e

        return cls(products=products, orders=orders, customers=customers)

    @classmethod
    def from_json(cls, path: Path) -> "Catalog":
        """Load a catalog from a JSON file."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        catalog = cls.from_dict(data)
        logger.info(
            f"Loaded store data from {path}: "
            f"{len(catalog.products)} products, {len(catalog.orders)} orders, "
            f"{len(catalog.customers)} customers"
        )
        return catalog


def load_catalog(path: Path | None = None) -> Catalog:
    """Load the catalog from path, or the built-in records when path is None."""
    if path is not None:
        return Catalog.from_json(path)

    from storeagent.store.seed import DEFAULT_STORE_DATA
    return Catalog.from_dict(DEFAULT_STORE_DATA)


__all__ = [
    "Catalog",
    "Customer",
    "Order",
    "OrderItem",
    "Product",
    "load_catalog",
    "normalize_id",
]
