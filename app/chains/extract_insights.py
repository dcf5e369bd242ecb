"""Insight extraction chain: summary, key points, entities, tags, actions."""

import json
import re

from pydantic import ValidationError

from app.core.llm import GenerationClient, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_knowledge import KnowledgeInsights

logger = get_logger(__name__)

SUMMARY_FALLBACK_CHARS = 200
MAX_FALLBACK_KEY_POINTS = 3

INSIGHTS_PROMPT = """Extract key insights from this content. Focus on actionable information, important concepts, and notable details.

Content: "{content}"

Respond with ONLY a JSON object in this format:
{{
  "summary": "Brief 2-3 sentence summary",
  "keyPoints": ["Point 1", "Point 2", "Point 3"],
  "entities": ["Entity1", "Entity2", "Entity3"],
  "tags": ["tag1", "tag2", "tag3"],
  "actionableInsights": ["Insight 1", "Insight 2"]
}}"""


def split_sentences(content: str) -> list[str]:
    """Split on runs of . ! ? and drop empty pieces."""
    return [s.strip() for s in re.split(r"[.!?]+", content) if s.strip()]


def fallback_insights(content: str) -> KnowledgeInsights:
    """Naive insights: truncated summary plus the first sentences as key points."""
    return KnowledgeInsights(
        summary=content[:SUMMARY_FALLBACK_CHARS] + "...",
        key_points=split_sentences(content)[:MAX_FALLBACK_KEY_POINTS],
    )


class InsightExtractor:
    """Extracts structured insights from knowledge content."""

    def __init__(self, generator: GenerationClient | None):
        self.generator = generator

    async def extract(self, content: str) -> KnowledgeInsights:
        """
        Extract insights from content.

        Malformed model output falls back to ``fallback_insights``; errors
        from the model call itself propagate.
        """
        if self.generator is None:
            return fallback_insights(content)

        raw_output = await self.generator.complete_async(INSIGHTS_PROMPT.format(content=content))

        try:
            insights = parse_llm_json(raw_output, KnowledgeInsights)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Insight extraction output unparseable, using sentence split: {e}")
            return fallback_insights(content)

        logger.info(
            f"Extracted {len(insights.key_points)} key points, {len(insights.tags)} tags"
        )
        return insights
