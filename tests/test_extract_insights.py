"""Tests for insight extraction."""

import pytest

from app.chains.extract_insights import InsightExtractor, fallback_insights, split_sentences


def test_split_sentences_drops_empty_pieces():
    assert split_sentences("One. Two!! Three?  ") == ["One", "Two", "Three"]


def test_fallback_insights():
    content = "First point. Second point! Third point? Fourth point."
    insights = fallback_insights(content)

    assert insights.summary == content[:200] + "..."
    assert insights.key_points == ["First point", "Second point", "Third point"]
    assert insights.tags == []


@pytest.mark.asyncio
async def test_extract_parses_camel_case_output(mock_generator):
    mock_generator.complete_async.return_value = """{
        "summary": "About pricing.",
        "keyPoints": ["Price high", "Discount rarely"],
        "entities": ["Acme"],
        "tags": ["pricing"],
        "actionableInsights": ["Raise prices"]
    }"""

    insights = await InsightExtractor(mock_generator).extract("Pricing notes")

    assert insights.summary == "About pricing."
    assert insights.key_points == ["Price high", "Discount rarely"]
    assert insights.actionable_insights == ["Raise prices"]
    assert insights.model_dump(by_alias=True)["keyPoints"] == ["Price high", "Discount rarely"]


@pytest.mark.asyncio
async def test_extract_unparseable_output_falls_back(mock_generator):
    mock_generator.complete_async.return_value = "not json at all"

    insights = await InsightExtractor(mock_generator).extract("Alpha. Beta. Gamma. Delta.")

    assert insights.key_points == ["Alpha", "Beta", "Gamma"]


@pytest.mark.asyncio
async def test_extract_without_model_falls_back():
    insights = await InsightExtractor(None).extract("Only one sentence")
    assert insights.key_points == ["Only one sentence"]
