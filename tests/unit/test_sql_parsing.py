"""Tests for SQL and narrative extraction from model output."""

from retail_assistant.sql.parsing import (
    clean_statement,
    extract_sql,
    first_statement,
    split_narrative,
    split_sections,
)

SECTIONED = """SQL_QUERY: SELECT category, SUM(total_amount) AS total_sales
FROM sales
GROUP BY category;
ANALYSIS: Bags lead revenue.
INSIGHTS: Accessories are growing.
RECOMMENDATION: Expand the bag assortment."""


def test_extract_from_sql_query_section():
    sql = extract_sql(SECTIONED)
    assert sql == "SELECT category, SUM(total_amount) AS total_sales FROM sales GROUP BY category"


def test_extract_from_fenced_block():
    output = "Here is the query:\n```sql\nSELECT * FROM products\n```\nIt lists products."
    assert extract_sql(output) == "SELECT * FROM products"


def test_extract_section_with_fence_inside():
    output = "SQL_QUERY:\n```googlesql\nSELECT 1;\n```\nANALYSIS: trivial"
    assert extract_sql(output) == "SELECT 1"


def test_extract_strips_comments():
    output = "SQL_QUERY: SELECT store_id -- the store\nFROM stores /* all */"
    assert extract_sql(output) == "SELECT store_id FROM stores"


def test_extract_bold_section_headers():
    output = "**SQL_QUERY:** SELECT 1\n**ANALYSIS:** nothing"
    assert extract_sql(output) == "SELECT 1"


def test_extract_empty_output():
    assert extract_sql("") is None
    assert extract_sql("   ") is None


def test_extract_does_not_validate():
    assert extract_sql("SQL_QUERY: DROP TABLE customers") == "DROP TABLE customers"


def test_first_statement_of_many():
    assert first_statement("SELECT 1; DROP TABLE sales;") == "SELECT 1"


def test_clean_statement_collapses_whitespace():
    assert clean_statement("SELECT\n   a,\n\tb\nFROM t ;") == "SELECT a, b FROM t"


def test_split_sections_keeps_first_occurrence():
    sections = split_sections("ANALYSIS: first\nANALYSIS: second")
    assert sections == {"ANALYSIS": "first"}


def test_split_narrative_sections():
    narrative = split_narrative(SECTIONED)
    assert narrative.startswith("Analysis: Bags lead revenue.")
    assert "Insights: Accessories are growing." in narrative
    assert "Recommendation: Expand the bag assortment." in narrative
    assert "SELECT" not in narrative


def test_split_narrative_prose_without_sections():
    output = "Sales are up.\n```sql\nSELECT 1\n```"
    assert split_narrative(output) == "Sales are up."


def test_split_narrative_bare_statement():
    assert split_narrative("SELECT * FROM sales") == ""


def test_split_narrative_sql_section_only():
    assert split_narrative("SQL_QUERY: DROP TABLE customers") == ""
