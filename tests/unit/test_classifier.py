"""Tests for delegation: model decision and keyword fallback."""

import pytest

from retail_assistant.models.schemas import DelegationDecision
from retail_assistant.orchestration.classifier import (
    FALLBACK_TOOL,
    MODEL_TOOL,
    DelegationClassifier,
    keyword_plan,
)
from tests.fakes import DELEGATION, FakeLanguageModel


@pytest.mark.parametrize(
    "text,expected",
    [
        ("What were our total sales last quarter?", ("query",)),
        ("What is our return policy?", ("knowledge",)),
        ("Explain the revenue trend", ("knowledge", "query")),
        ("Hello there", ("knowledge", "query")),
        ("Show customer counts", ("query",)),
        ("Where is the onboarding guide?", ("knowledge",)),
    ],
)
def test_keyword_plan(text, expected):
    assert keyword_plan(text).names == expected


def test_keyword_requires_leading_word_boundary():
    # "resume" must not match "sum"; "yearly" still matches "year".
    assert keyword_plan("resume").names == ("knowledge", "query")
    assert keyword_plan("yearly numbers").names == ("query",)


async def test_model_decision_used():
    llm = FakeLanguageModel(
        structured={DelegationDecision: DelegationDecision(action="both", reasoning="needs data and policy", confidence=0.9)}
    )
    delegation = await DelegationClassifier(llm).classify("What is our return policy?")
    assert delegation.plan.names == ("knowledge", "query")
    assert delegation.tool_used == MODEL_TOOL
    assert delegation.reasoning == "needs data and policy"
    assert delegation.confidence == 0.9


async def test_plain_json_decision_used():
    llm = FakeLanguageModel(replies={DELEGATION: '{"thought": "t", "action": "knowledge"}'})
    delegation = await DelegationClassifier(llm).classify("anything")
    assert delegation.plan.names == ("knowledge",)
    assert delegation.reasoning == "t"


async def test_unparsable_decision_uses_keywords():
    llm = FakeLanguageModel(replies={DELEGATION: "ACTION: SQL_AGENT"})
    delegation = await DelegationClassifier(llm).classify("What were our total sales last quarter?")
    assert delegation.plan.names == ("query",)
    assert delegation.tool_used == FALLBACK_TOOL


async def test_model_unavailable_uses_keywords():
    delegation = await DelegationClassifier(FakeLanguageModel()).classify("What is our return policy?")
    assert delegation.plan.names == ("knowledge",)
    assert delegation.tool_used == FALLBACK_TOOL
