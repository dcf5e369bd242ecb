"""Scope classification chain.

Assigns submitted content to one of the fixed knowledge scopes (or a new one
proposed by the model). Without a configured model the classification is done
by keyword matching.
"""

import json
import re

from pydantic import ValidationError

from app.core.llm import GenerationClient, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_knowledge import ScopeResult

logger = get_logger(__name__)

DEFAULT_SCOPE = "General Knowledge"

KNOWLEDGE_SCOPES = [
    "Technology & AI",
    "Marketing & Branding",
    "Leadership & Management",
    "Business Strategy",
    "Product Development",
    "Data Science",
    "Design & UX",
    "Finance & Investment",
    "Health & Wellness",
    DEFAULT_SCOPE,
]

# First matching rule wins. Keywords match whole words only.
KEYWORD_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("Marketing & Branding", ("marketing", "brand", "brands", "branding")),
    ("Technology & AI", ("technology", "technologies", "ai", "software")),
    ("Leadership & Management", ("leadership", "management")),
    ("Business Strategy", ("business", "businesses", "strategy", "strategies")),
]

PARSE_FALLBACK_REASONING = "AI analysis failed, using default category"

SCOPE_PROMPT = """Analyze the following content and determine the most appropriate knowledge scope/category.

Content: "{content}..."

Choose from these categories or suggest a new one:
{categories}

Respond with ONLY a JSON object in this format:
{{
  "scope": "Category Name",
  "confidence": 0.95,
  "reasoning": "Brief explanation of why this category fits"
}}"""


def classify_scope_by_keywords(content: str) -> ScopeResult:
    """Deterministic keyword classification used when no model is available."""
    lowered = content.lower()

    for scope, keywords in KEYWORD_RULES:
        for keyword in keywords:
            if re.search(rf"\b{re.escape(keyword)}\b", lowered):
                return ScopeResult(
                    scope=scope,
                    confidence=0.6,
                    reasoning=f"Matched keyword '{keyword}'",
                )

    return ScopeResult(
        scope=DEFAULT_SCOPE,
        confidence=0.5,
        reasoning="No category keywords found, using default category",
    )


class ScopeClassifier:
    """Classifies content into a knowledge scope."""

    def __init__(self, generator: GenerationClient | None, prompt_chars: int = 1000):
        self.generator = generator
        self.prompt_chars = prompt_chars

    def build_prompt(self, content: str) -> str:
        categories = "\n".join(f"- {name}" for name in KNOWLEDGE_SCOPES)
        return SCOPE_PROMPT.format(content=content[: self.prompt_chars], categories=categories)

    async def classify(self, content: str) -> ScopeResult:
        """
        Classify content into a scope.

        Makes a single model call. Malformed model output yields the
        General Knowledge fallback; errors from the model call itself
        propagate.

        Args:
            content: Raw knowledge text

        Returns:
            ScopeResult with scope name, confidence and reasoning
        """
        if self.generator is None:
            return classify_scope_by_keywords(content)

        raw_output = await self.generator.complete_async(self.build_prompt(content), temperature=0)

        try:
            result = parse_llm_json(raw_output, ScopeResult)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Scope classification output unparseable, using default: {e}")
            return ScopeResult(scope=DEFAULT_SCOPE, confidence=0.5, reasoning=PARSE_FALLBACK_REASONING)

        result.scope = result.scope.strip() or DEFAULT_SCOPE
        logger.info(f"Classified content into scope '{result.scope}' ({result.confidence})")
        return result
