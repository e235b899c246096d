"""Ask one question and print the conversation trace.

Usage:
    python scripts/ask.py "What were our total sales last quarter?" [--json]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add src to path (matching the other scripts)
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from retail_assistant.config.settings import Settings
from retail_assistant.models.schemas import ConversationStepOut, QueryResponse
from retail_assistant.observability.logger import setup_logging
from retail_assistant.orchestration.factory import build_orchestrator


def print_step(step: ConversationStepOut) -> None:
    meta = step.metadata
    print(f"\n[{step.role.upper()}] {step.timestamp.isoformat()}")
    print(step.content)
    details = {
        "tool": meta.tool_used,
        "confidence": meta.confidence,
        "plan": meta.delegation_plan,
        "sql": meta.sql_query,
        "live": meta.using_live_data,
        "safety": meta.safety_score,
    }
    shown = ", ".join(f"{k}={v}" for k, v in details.items() if v is not None)
    if shown:
        print(f"  ({shown})")


async def run(question: str, as_json: bool) -> None:
    settings = Settings()
    setup_logging(level="WARNING", json_output=settings.log_json)
    components = build_orchestrator(settings)
    steps = await components.orchestrator.process_query(question)
    response = QueryResponse(steps=[ConversationStepOut.from_domain(s) for s in steps])

    if as_json:
        print(json.dumps(response.model_dump(mode="json", by_alias=True), indent=2))
        return
    for step in response.steps:
        print_step(step)


def main() -> None:
    parser = argparse.ArgumentParser(description="Ask the retail analytics assistant a question")
    parser.add_argument("question")
    parser.add_argument("--json", action="store_true", help="Print the API response body")
    args = parser.parse_args()
    asyncio.run(run(args.question, args.json))


if __name__ == "__main__":
    main()
