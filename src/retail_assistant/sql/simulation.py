"""Illustrative result sets used when live data is unavailable.

Shapes are fixed per intent, values are randomized. With a seed, the values
depend only on (seed, sql), so identical inputs give identical results.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable

from retail_assistant.models.domain import FieldSchema, QueryResult

CATEGORIES = ("Bags", "Shoes", "Shirts", "Accessories", "Outerwear")
SEGMENTS = ("Platinum", "Gold", "Silver", "Bronze")
PRODUCTS = (
    ("Leather Tote", "Bags"),
    ("Canvas Sneaker", "Shoes"),
    ("Oxford Shirt", "Shirts"),
    ("Silk Scarf", "Accessories"),
    ("Rain Jacket", "Outerwear"),
)


def _sales_rows(rng: random.Random) -> list[dict[str, Any]]:
    rows = []
    for category in CATEGORIES:
        orders = rng.randint(400, 2500)
        aov = round(rng.uniform(35.0, 180.0), 2)
        rows.append(
            {
                "category": category,
                "total_sales": round(orders * aov, 2),
                "order_count": orders,
                "avg_order_value": aov,
            }
        )
    rows.sort(key=lambda r: r["total_sales"], reverse=True)
    return rows


def _customer_rows(rng: random.Random) -> list[dict[str, Any]]:
    rows = []
    for i, segment in enumerate(SEGMENTS):
        rows.append(
            {
                "segment": segment,
                "customer_count": rng.randint(200, 1500) * (i + 1),
                "avg_lifetime_value": round(rng.uniform(2500.0, 6000.0) / (i + 1), 2),
                "retention_rate": round(rng.uniform(0.55, 0.92) - 0.08 * i, 3),
            }
        )
    return rows


def _product_rows(rng: random.Random) -> list[dict[str, Any]]:
    rows = []
    for name, category in PRODUCTS:
        reorder_point = rng.randint(20, 60)
        rows.append(
            {
                "product_name": name,
                "category": category,
                "stock_level": rng.randint(0, 250),
                "reorder_point": reorder_point,
                "units_sold": rng.randint(50, 900),
            }
        )
    return rows


def _generic_rows(rng: random.Random) -> list[dict[str, Any]]:
    return [
        {
            "metric": "Total Sales",
            "value": f"${rng.uniform(1.5, 3.5):.1f}M",
            "change": f"{rng.randint(-5, 15):+d}%",
        },
        {
            "metric": "Customer Engagement",
            "value": f"{rng.randint(30, 60)}%",
            "change": f"{rng.randint(-8, 8):+d}%",
        },
        {
            "metric": "Inventory Level",
            "value": f"{rng.randint(60, 95)}%",
            "change": f"{rng.randint(-4, 6):+d}%",
        },
    ]


@dataclass(frozen=True)
class SimulationIntent:
    name: str
    keywords: tuple[str, ...]
    field_schema: tuple[FieldSchema, ...]
    rows: Callable[[random.Random], list[dict[str, Any]]]


SIMULATION_INTENTS: tuple[SimulationIntent, ...] = (
    SimulationIntent(
        name="sales",
        keywords=("sales", "revenue", "total_amount", "sale_price", "orders", "order_items"),
        field_schema=(
            FieldSchema("category", "STRING", "REQUIRED"),
            FieldSchema("total_sales", "FLOAT", "REQUIRED"),
            FieldSchema("order_count", "INTEGER", "REQUIRED"),
            FieldSchema("avg_order_value", "FLOAT", "REQUIRED"),
        ),
        rows=_sales_rows,
    ),
    SimulationIntent(
        name="customers",
        keywords=("customer", "segment", "loyalty", "users"),
        field_schema=(
            FieldSchema("segment", "STRING", "REQUIRED"),
            FieldSchema("customer_count", "INTEGER", "REQUIRED"),
            FieldSchema("avg_lifetime_value", "FLOAT", "REQUIRED"),
            FieldSchema("retention_rate", "FLOAT", "NULLABLE"),
        ),
        rows=_customer_rows,
    ),
    SimulationIntent(
        name="products",
        keywords=("product", "inventory", "stock"),
        field_schema=(
            FieldSchema("product_name", "STRING", "REQUIRED"),
            FieldSchema("category", "STRING", "REQUIRED"),
            FieldSchema("stock_level", "INTEGER", "REQUIRED"),
            FieldSchema("reorder_point", "INTEGER", "REQUIRED"),
            FieldSchema("units_sold", "INTEGER", "REQUIRED"),
        ),
        rows=_product_rows,
    ),
)

GENERIC_INTENT = SimulationIntent(
    name="generic",
    keywords=(),
    field_schema=(
        FieldSchema("metric", "STRING", "REQUIRED"),
        FieldSchema("value", "STRING", "REQUIRED"),
        FieldSchema("change", "STRING", "NULLABLE"),
    ),
    rows=_generic_rows,
)


def detect_intent(sql: str | None) -> SimulationIntent:
    if not sql:
        return GENERIC_INTENT
    lowered = sql.lower()
    for intent in SIMULATION_INTENTS:
        if any(keyword in lowered for keyword in intent.keywords):
            return intent
    return GENERIC_INTENT


class SimulatedResultGenerator:
    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed

    def generate(self, sql: str | None) -> QueryResult:
        intent = detect_intent(sql)
        rng = self._rng_for(sql)
        rows = intent.rows(rng)
        return QueryResult.from_rows(
            rows=rows,
            field_schema=list(intent.field_schema),
            elapsed_ms=0.0,
        )

    def _rng_for(self, sql: str | None) -> random.Random:
        if self._seed is None:
            return random.Random()
        return random.Random(f"{self._seed}:{sql or ''}")
