"""Brainstorming chain: ideas that connect the user's knowledge scopes."""

from typing import Any

from pydantic import ValidationError

from app.core.llm import GenerationClient, parse_llm_json_list
from app.core.logging import get_logger
from app.core.schemas_knowledge import BrainstormIdea

logger = get_logger(__name__)

RECENT_TITLES_PER_SCOPE = 3

BRAINSTORM_PROMPT = """Based on the user's personal knowledge base, generate 3-4 creative brainstorming ideas that connect different areas of their knowledge.

User's Knowledge Areas:
{knowledge_summary}

Generate ideas that:
1. Connect 2-3 different knowledge areas
2. Suggest practical applications or innovations
3. Identify potential opportunities or insights
4. Are actionable and thought-provoking

Respond with ONLY a JSON array in this format:
[
  {{
    "title": "Idea Title",
    "description": "Detailed description of the idea and why it's interesting",
    "relatedScopes": ["Scope 1", "Scope 2"],
    "actionItems": ["Action 1", "Action 2"]
  }}
]

Make the ideas specific to their knowledge areas, not generic advice."""


def summarize_knowledge(scopes: list[dict[str, Any]]) -> str:
    """One line per scope: name, description and its most recent entry titles."""
    lines = []
    for scope in scopes:
        entries = sorted(
            scope.get("knowledge_entries") or [],
            key=lambda e: e.get("created_at") or "",
            reverse=True,
        )
        titles = [e.get("title") or "Untitled" for e in entries[:RECENT_TITLES_PER_SCOPE]]
        recent = ", ".join(titles) if titles else "No entries"
        description = scope.get("description") or "No description"
        lines.append(f"{scope['name']}: {description} (Recent: {recent})")
    return "\n".join(lines)


def fallback_ideas(scope_names: list[str]) -> list[BrainstormIdea]:
    """Template ideas built from scope names alone."""
    ideas = []

    if len(scope_names) >= 2:
        first, second = scope_names[0], scope_names[1]
        ideas.append(
            BrainstormIdea(
                title=f"Cross-Domain Innovation: {first} meets {second}",
                description=(
                    f"Explore how insights from {first} could revolutionize approaches in "
                    f"{second}. Look for unexpected connections and opportunities."
                ),
                related_scopes=scope_names[:2],
                action_items=["Identify common themes", "Research intersection points"],
            )
        )

    if len(scope_names) >= 3:
        ideas.append(
            BrainstormIdea(
                title="Knowledge Synthesis Opportunity",
                description=(
                    f"Your diverse knowledge in {', '.join(scope_names[:3])} creates unique "
                    "opportunities for synthesis and innovation."
                ),
                related_scopes=scope_names[:3],
                action_items=["Map knowledge connections", "Identify synthesis opportunities"],
            )
        )

    return ideas


class BrainstormGenerator:
    """Generates cross-scope ideas; falls back to templates on any failure."""

    def __init__(self, generator: GenerationClient | None):
        self.generator = generator

    async def generate(self, scopes: list[dict[str, Any]]) -> list[BrainstormIdea]:
        """
        Generate ideas from the user's scopes.

        Args:
            scopes: Scope rows (name, description) with nested
                ``knowledge_entries`` (title, processed_content, created_at)

        Returns:
            List of ideas; empty when the model answers with something other
            than a JSON array
        """
        scope_names = [scope["name"] for scope in scopes]

        if self.generator is None:
            return fallback_ideas(scope_names)

        try:
            raw_output = await self.generator.complete_async(
                BRAINSTORM_PROMPT.format(knowledge_summary=summarize_knowledge(scopes)),
                temperature=0.8,
            )
            ideas = [BrainstormIdea.model_validate(item) for item in parse_llm_json_list(raw_output)]
        except (ValueError, ValidationError) as e:
            logger.warning(f"Brainstorming output unparseable, using template ideas: {e}")
            return fallback_ideas(scope_names)
        except Exception as e:
            logger.error(f"Brainstorming generation failed, using template ideas: {e}")
            return fallback_ideas(scope_names)

        logger.info(f"Generated {len(ideas)} brainstorming ideas across {len(scopes)} scopes")
        return ideas
