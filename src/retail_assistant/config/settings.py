"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    google_api_key: str = ""

    # LLM / Gemini
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.1
    gemini_max_tokens: int = 4096

    # Data backend
    data_backend: Literal["sqlite", "bigquery", "none"] = "sqlite"
    sqlite_db_path: str = "data/retail.db"
    bigquery_project_id: str = ""
    bigquery_dataset_id: str = "thelook_ecommerce"
    bigquery_location: str = "US"

    # Query guardrails
    max_bytes_billed: int = 10_000_000
    query_timeout_ms: int = 30_000
    max_result_rows: int = 1000
    recency_days: int = 7
    recency_column: str = "created_at"
    large_tables: list[str] = ["events", "order_items", "users"]

    # Orchestration
    capability_timeout_ms: int = 45_000
    degraded_confidence: float = 0.3
    synthesis_fallback_confidence: float = 0.7

    # Capability confidences
    knowledge_confidence: float = 0.85
    knowledge_fallback_confidence: float = 0.6
    query_live_confidence: float = 0.9
    query_simulated_confidence: float = 0.75
    query_model_failure_confidence: float = 0.6

    # Safety
    safety_pass_threshold: float = 0.7
    safety_fail_open_score: float = 0.75
    safety_pattern_penalty: float = 0.2

    # Simulation (None = fresh randomness per call)
    simulation_seed: int | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_json: bool = False

    model_config = {"env_file": ".env", "env_prefix": "RETAIL_"}
