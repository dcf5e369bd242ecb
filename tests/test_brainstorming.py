"""Tests for cross-scope brainstorming."""

import pytest

from app.chains.generate_brainstorming import (
    BrainstormGenerator,
    fallback_ideas,
    summarize_knowledge,
)

SCOPES = [
    {
        "name": "Data Science",
        "description": "Models and metrics",
        "knowledge_entries": [
            {"title": "Old", "created_at": "2025-01-01T00:00:00+00:00"},
            {"title": "Newest", "created_at": "2025-03-01T00:00:00+00:00"},
            {"title": "Middle", "created_at": "2025-02-01T00:00:00+00:00"},
            {"title": "Oldest", "created_at": "2024-12-01T00:00:00+00:00"},
        ],
    },
    {"name": "Design & UX", "description": None, "knowledge_entries": []},
    {"name": "Finance & Investment", "description": "Money", "knowledge_entries": []},
]


def test_summarize_knowledge_uses_three_most_recent_titles():
    summary = summarize_knowledge(SCOPES)
    lines = summary.splitlines()

    assert lines[0] == "Data Science: Models and metrics (Recent: Newest, Middle, Old)"
    assert lines[1] == "Design & UX: No description (Recent: No entries)"


def test_fallback_ideas_by_scope_count():
    assert fallback_ideas(["A"]) == []

    two = fallback_ideas(["A", "B"])
    assert [i.title for i in two] == ["Cross-Domain Innovation: A meets B"]

    three = fallback_ideas(["A", "B", "C"])
    assert three[1].title == "Knowledge Synthesis Opportunity"
    assert three[1].related_scopes == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_generate_parses_ideas(mock_generator):
    mock_generator.complete_async.return_value = """[
        {"title": "Design metrics", "description": "Measure UX",
         "relatedScopes": ["Data Science", "Design & UX"], "actionItems": ["Pick KPIs"]}
    ]"""

    ideas = await BrainstormGenerator(mock_generator).generate(SCOPES)

    assert len(ideas) == 1
    assert ideas[0].related_scopes == ["Data Science", "Design & UX"]
    assert mock_generator.complete_async.call_args.kwargs["temperature"] == 0.8


@pytest.mark.asyncio
async def test_generate_unparseable_uses_templates(mock_generator):
    mock_generator.complete_async.return_value = "Sure! Here are some ideas..."
    ideas = await BrainstormGenerator(mock_generator).generate(SCOPES)
    assert ideas[0].title == "Cross-Domain Innovation: Data Science meets Design & UX"


@pytest.mark.asyncio
async def test_generate_model_error_uses_templates(mock_generator):
    mock_generator.complete_async.side_effect = RuntimeError("down")
    ideas = await BrainstormGenerator(mock_generator).generate(SCOPES)
    assert len(ideas) == 2


@pytest.mark.asyncio
async def test_generate_non_array_json_gives_no_ideas(mock_generator):
    mock_generator.complete_async.return_value = '{"title": "not a list"}'
    assert await BrainstormGenerator(mock_generator).generate(SCOPES) == []
