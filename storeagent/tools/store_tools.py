"""
Store Support Tools
===================

Tools the agent uses to answer customer questions:
- search_products: find products by name or category, with price/stock filters
- get_product_details: full record for one product
- get_order_status: status, items and issues of an order
- check_delivery_time: whether a product can arrive by a given date
- calculate_total_cost: price a basket including shipping
- check_return_eligibility: whether an order is inside the return window

Every tool reads from a Catalog and never changes it. Missing entities and
bad values come back as failed ToolResults so the model can explain them.

Usage:
    registry = ToolRegistry(create_store_tools(catalog))
"""

from datetime import date, timedelta
from typing import Callable

from storeagent.store import Catalog
from storeagent.tools import ToolArgumentError, ToolDefinition, ToolRegistry, ToolResult
from storeagent.utils.logger import Logger

logger = Logger("StoreTools")

RETURN_WINDOW_DAYS = 30
FREE_SHIPPING_THRESHOLD = 1000
SHIPPING_FEE = 50


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ToolArgumentError("Invalid date, expected YYYY-MM-DD") from None


def create_store_tools(
    catalog: Catalog,
    today: Callable[[], date] = date.today
) -> list[ToolDefinition]:
    """
    Build the store tools bound to a catalog.

    Args:
        catalog: Records the tools read from
        today: Returns the current date (injectable for tests)

    Returns:
        Tool definitions in manifest order
    """

    # ==========================================================================
    # Products
    # ==========================================================================

    async def search_products(params: dict) -> ToolResult:
        results = catalog.search_products(params["query"])

        max_price = params.get("max_price")
        min_price = params.get("min_price")
        if max_price is not None:
            results = [p for p in results if p.price <= max_price]
        if min_price is not None:
            results = [p for p in results if p.price >= min_price]
        if params.get("in_stock_only"):
            results = [p for p in results if p.available]

        return ToolResult.ok(products=[
            {**p.to_dict(), "available": p.available}
            for p in results
        ])

    async def get_product_details(params: dict) -> ToolResult:
        product = catalog.find_product(params["product_id"])
        if product is None:
            return ToolResult.fail("Product not found")
        return ToolResult.ok(product=product.to_dict())

    async def check_delivery_time(params: dict) -> ToolResult:
        product = catalog.find_product(params["product_id"])
        if product is None:
            return ToolResult.fail("Product not found")

        required_date = _parse_date(params["required_date"])
        estimated = today() + timedelta(days=product.delivery_days)

        return ToolResult.ok(
            can_deliver=estimated <= required_date,
            estimated_delivery=estimated.isoformat(),
            days_needed=product.delivery_days,
            product_name=product.name,
        )

    async def calculate_total_cost(params: dict) -> ToolResult:
        product_ids: list[str] = params["product_ids"]
        quantities: list = params["quantities"]

        items = []
        unknown = []
        subtotal = 0
        for index, product_id in enumerate(product_ids):
            product = catalog.find_product(product_id)
            if product is None:
                unknown.append(product_id)
                continue

            quantity = quantities[index] if index < len(quantities) else None
            if not quantity or quantity <= 0:
                quantity = 1

            line_total = product.price * quantity
            subtotal += line_total
            items.append({
                "product": product.name,
                "quantity": quantity,
                "unit_price": product.price,
                "subtotal": line_total,
            })

        free_shipping = subtotal >= FREE_SHIPPING_THRESHOLD
        shipping = 0 if free_shipping else SHIPPING_FEE

        return ToolResult.ok(
            items=items,
            unknown_products=unknown,
            subtotal=subtotal,
            shipping=shipping,
            total=subtotal + shipping,
            free_shipping=free_shipping,
        )

    # ==========================================================================
    # Orders
    # ==========================================================================

    async def get_order_status(params: dict) -> ToolResult:
        order = catalog.find_order(params["order_id"])
        if order is None:
            return ToolResult.fail("Order not found")

        items = []
        for item in order.items:
            product = catalog.find_product(item.product_id)
            items.append({
                "product_name": product.name if product else None,
                "quantity": item.quantity,
            })

        customer = catalog.find_customer(order.customer_id)

        return ToolResult.ok(order={
            "id": order.id,
            "status": order.status,
            "delivery_date": order.delivery_date,
            "order_date": order.order_date,
            "items": items,
            "total": order.total,
            "issue": order.issue,
            "customer_name": customer.name if customer else None,
        })

    async def check_return_eligibility(params: dict) -> ToolResult:
        order = catalog.find_order(params["order_id"])
        if order is None:
            return ToolResult.fail("Order not found")

        days_elapsed = (today() - date.fromisoformat(order.order_date)).days
        eligible = days_elapsed <= RETURN_WINDOW_DAYS

        return ToolResult.ok(
            eligible=eligible,
            days_since_order=days_elapsed,
            days_remaining=RETURN_WINDOW_DAYS - days_elapsed if eligible else 0,
            order_date=order.order_date,
        )

    # ==========================================================================
    # Definitions
    # ==========================================================================

    return [
        ToolDefinition(
            name="search_products",
            description=(
                "Search for products by name, category, or price range. "
                "Returns matching products with stock and delivery information."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query (product name or category)"
                    },
                    "max_price": {
                        "type": "number",
                        "description": "Maximum price filter (optional)"
                    },
                    "min_price": {
                        "type": "number",
                        "description": "Minimum price filter (optional)"
                    },
                    "in_stock_only": {
                        "type": "boolean",
                        "description": "Filter to only show in-stock items"
                    }
                },
                "required": ["query"]
            },
            handler=search_products
        ),
        ToolDefinition(
            name="get_order_status",
            description=(
                "Get detailed status of an order including delivery date, "
                "items, and any issues."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "order_id": {
                        "type": "string",
                        "description": "The order ID (e.g., O9001)"
                    }
                },
                "required": ["order_id"]
            },
            handler=get_order_status
        ),
        ToolDefinition(
            name="check_delivery_time",
            description="Check if a product can be delivered by a specific date.",
            parameters={
                "type": "object",
                "properties": {
                    "product_id": {
                        "type": "string",
                        "description": "Product ID to check"
                    },
                    "required_date": {
                        "type": "string",
                        "description": "Required delivery date (YYYY-MM-DD)"
                    }
                },
                "required": ["product_id", "required_date"]
            },
            handler=check_delivery_time
        ),
        ToolDefinition(
            name="get_product_details",
            description=(
                "Get complete details of a specific product including price, "
                "stock, and specifications."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "product_id": {
                        "type": "string",
                        "description": "Product ID (e.g., P1001)"
                    }
                },
                "required": ["product_id"]
            },
            handler=get_product_details
        ),
        ToolDefinition(
            name="calculate_total_cost",
            description="Calculate total cost including shipping for multiple products.",
            parameters={
                "type": "object",
                "properties": {
                    "product_ids": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Array of product IDs"
                    },
                    "quantities": {
                        "type": "array",
                        "items": {"type": "number"},
                        "description": "Quantities for each product"
                    }
                },
                "required": ["product_ids", "quantities"]
            },
            handler=calculate_total_cost
        ),
        ToolDefinition(
            name="check_return_eligibility",
            description=(
                "Check if an order is eligible for return based on return "
                f"policy ({RETURN_WINDOW_DAYS} days)."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "order_id": {
                        "type": "string",
                        "description": "Order ID to check"
                    }
                },
                "required": ["order_id"]
            },
            handler=check_return_eligibility
        ),
    ]


def create_store_registry(
    catalog: Catalog,
    today: Callable[[], date] = date.today
) -> ToolRegistry:
    """Registry holding every store tool."""
    registry = ToolRegistry(create_store_tools(catalog, today))
    logger.info(f"Registered {len(registry)} tools")
    return registry
