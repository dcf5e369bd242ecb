"""Tests for scope classification."""

import pytest

from app.chains.classify_scope import (
    DEFAULT_SCOPE,
    KNOWLEDGE_SCOPES,
    PARSE_FALLBACK_REASONING,
    ScopeClassifier,
    classify_scope_by_keywords,
)


class TestKeywordClassification:
    def test_marketing_sentence(self):
        result = classify_scope_by_keywords("Our marketing plan focuses on brand awareness.")
        assert result.scope == "Marketing & Branding"

    def test_first_rule_wins(self):
        """Marketing is checked before technology."""
        result = classify_scope_by_keywords("Software for brand teams")
        assert result.scope == "Marketing & Branding"

    def test_technology(self):
        assert classify_scope_by_keywords("New AI tooling").scope == "Technology & AI"

    def test_keyword_must_start_a_word(self):
        """'ai' inside 'maintain' is not a match."""
        result = classify_scope_by_keywords("We maintain the garden every day")
        assert result.scope == DEFAULT_SCOPE
        assert result.confidence == 0.5

    def test_keyword_must_be_a_whole_word(self):
        result = classify_scope_by_keywords("Our aim this year is to repair the airline's aisle seats.")
        assert result.scope == DEFAULT_SCOPE

    def test_plural_keyword(self):
        assert classify_scope_by_keywords("Two brands merged").scope == "Marketing & Branding"

    def test_business(self):
        assert classify_scope_by_keywords("Quarterly strategy review").scope == "Business Strategy"


class TestScopeClassifier:
    @pytest.mark.asyncio
    async def test_parses_model_output(self, mock_generator):
        mock_generator.complete_async.return_value = (
            '```json\n{"scope": "Design & UX", "confidence": 0.9, "reasoning": "UI talk"}\n```'
        )
        classifier = ScopeClassifier(mock_generator)

        result = await classifier.classify("Notes about button layouts")

        assert result.scope == "Design & UX"
        assert result.confidence == 0.9
        assert mock_generator.complete_async.await_count == 1
        assert mock_generator.complete_async.call_args.kwargs["temperature"] == 0

    @pytest.mark.asyncio
    async def test_unparseable_output_falls_back(self, mock_generator):
        mock_generator.complete_async.return_value = "I think this is about marketing."
        classifier = ScopeClassifier(mock_generator)

        result = await classifier.classify("Our marketing plan")

        assert result.scope == DEFAULT_SCOPE
        assert result.confidence == 0.5
        assert result.reasoning == PARSE_FALLBACK_REASONING

    @pytest.mark.asyncio
    async def test_missing_scope_falls_back(self, mock_generator):
        mock_generator.complete_async.return_value = '{"confidence": 0.9}'
        result = await ScopeClassifier(mock_generator).classify("anything")
        assert result.scope == DEFAULT_SCOPE

    @pytest.mark.asyncio
    async def test_model_call_error_propagates(self, mock_generator):
        mock_generator.complete_async.side_effect = RuntimeError("rate limited")
        with pytest.raises(RuntimeError):
            await ScopeClassifier(mock_generator).classify("anything")

    @pytest.mark.asyncio
    async def test_without_model_uses_keywords(self):
        result = await ScopeClassifier(None).classify(
            "Leadership lessons from managing remote teams"
        )
        assert result.scope == "Leadership & Management"

    def test_prompt_truncates_content_and_lists_categories(self):
        classifier = ScopeClassifier(None, prompt_chars=10)
        prompt = classifier.build_prompt("0123456789ABCDEF")

        assert "0123456789..." in prompt
        assert "ABCDEF" not in prompt
        for name in KNOWLEDGE_SCOPES:
            assert f"- {name}" in prompt
