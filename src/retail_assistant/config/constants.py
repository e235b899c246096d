"""Rule tables and fixed texts.

Keyword lists are a starting configuration for routing and guardrails, not a
security boundary.
"""

from __future__ import annotations

# Delegation fallback: (keyword) lists matched at a leading word boundary.
QUERY_INTENT_KEYWORDS: tuple[str, ...] = (
    "sales",
    "revenue",
    "customer",
    "inventory",
    "total",
    "count",
    "average",
    "sum",
    "last quarter",
    "month",
    "year",
    "performance",
    "metrics",
    "analytics",
)

KNOWLEDGE_INTENT_KEYWORDS: tuple[str, ...] = (
    "policy",
    "document",
    "report",
    "recommendation",
    "how to",
    "what is",
    "explain",
    "guide",
    "process",
    "procedure",
)

# Generated SQL: any of these as a whole word means "not a SELECT".
DISALLOWED_SQL_KEYWORDS: tuple[str, ...] = (
    "DROP",
    "DELETE",
    "INSERT",
    "UPDATE",
    "CREATE",
    "ALTER",
    "TRUNCATE",
)

DISALLOWED_SQL_REFERENCES: tuple[str, ...] = ("INFORMATION_SCHEMA.",)

# Response screening: (regex, issue label), applied in order.
RESPONSE_DISALLOW_RULES: tuple[tuple[str, str], ...] = (
    (r"\bdrop\s+(table|database|schema)\b", "destructive SQL: DROP"),
    (r"\bdelete\s+from\b", "destructive SQL: DELETE"),
    (r"\btruncate\s+table\b", "destructive SQL: TRUNCATE"),
    (r"\balter\s+table\b", "destructive SQL: ALTER"),
    (r"\binsert\s+into\b", "data modification: INSERT"),
    (r"\bupdate\s+\w+\s+set\b", "data modification: UPDATE"),
    (r"\bpasswords?\b", "secret-like term: password"),
    (r"\bapi[\s_-]?keys?\b", "secret-like term: api key"),
    (r"\bprivate[\s_-]?keys?\b", "secret-like term: private key"),
    (r"\baccess[\s_-]?tokens?\b", "secret-like term: access token"),
    (r"\bcredentials?\b", "secret-like term: credentials"),
)

KNOWLEDGE_SOURCES: tuple[str, ...] = (
    "Retail Best Practices Database",
    "Industry Guidelines",
    "Product Documentation",
)

RECENCY_EXPRESSIONS: dict[str, str] = {
    "bigquery": "TIMESTAMP_SUB(CURRENT_TIMESTAMP(), INTERVAL {days} DAY)",
    "sqlite": "datetime('now', '-{days} days')",
}

COMPLIANCE_REVIEW_MESSAGE = (
    "This response has been withheld because it needs compliance review. "
    "Please rephrase your question or contact your analytics team."
)

SINGLE_CAPABILITY_PREFIX = "Based on the analysis, here's what I found: "
SYNTHESIS_FALLBACK_PREFIX = "Based on the analysis from our specialized capabilities: "
SYNTHESIS_FALLBACK_CONNECTOR = " Additionally, "

PREVIEW_ROWS = 5
PREVIEW_VALUE_CHARS = 50

# Sample rows shown with each table in the schema description.
SCHEMA_SAMPLE_ROWS = 3
SCHEMA_SAMPLE_VALUE_CHARS = 20
SCHEMA_SAMPLE_MAX_BYTES = 5_000_000
SCHEMA_SAMPLE_TIMEOUT_MS = 5_000

FALLBACK_RETAIL_SCHEMA = """RETAIL DATABASE SCHEMA (built-in):

TABLE: sales
Fields:
  - sale_id: STRING (REQUIRED) - Unique identifier for each sale
  - product_id: STRING (REQUIRED) - Product identifier
  - customer_id: STRING (NULLABLE) - Customer identifier
  - store_id: STRING (REQUIRED) - Store identifier
  - sale_date: DATE (REQUIRED) - Date of sale
  - quantity: INTEGER (REQUIRED) - Quantity sold
  - unit_price: FLOAT (REQUIRED) - Price per unit
  - total_amount: FLOAT (REQUIRED) - Total sale amount
  - discount_amount: FLOAT (NULLABLE) - Discount applied
  - payment_method: STRING (REQUIRED) - Payment method used

TABLE: products
Fields:
  - product_id: STRING (REQUIRED) - Unique product identifier
  - product_name: STRING (REQUIRED) - Product name
  - category: STRING (REQUIRED) - Product category (Bags, Shoes, Shirts, Accessories)
  - brand: STRING (REQUIRED) - Brand name
  - cost_price: FLOAT (REQUIRED) - Cost to acquire product
  - retail_price: FLOAT (REQUIRED) - Selling price
  - stock_level: INTEGER (REQUIRED) - Current inventory level
  - reorder_point: INTEGER (REQUIRED) - Minimum stock before reorder

TABLE: customers
Fields:
  - customer_id: STRING (REQUIRED) - Unique customer identifier
  - first_name: STRING (REQUIRED) - Customer first name
  - last_name: STRING (REQUIRED) - Customer last name
  - registration_date: DATE (REQUIRED) - When customer registered
  - loyalty_tier: STRING (REQUIRED) - Customer loyalty level
  - total_lifetime_value: FLOAT (REQUIRED) - Total customer value

TABLE: stores
Fields:
  - store_id: STRING (REQUIRED) - Unique store identifier
  - store_name: STRING (REQUIRED) - Store name
  - city: STRING (REQUIRED) - Store city
  - store_type: STRING (REQUIRED) - Type of store (flagship, outlet, etc.)
"""
