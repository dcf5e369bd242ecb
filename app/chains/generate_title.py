"""Title generation for knowledge submitted without one."""

import re

from app.core.llm import GenerationClient, strip_llm_fences
from app.core.logging import get_logger

logger = get_logger(__name__)

UNTITLED = "Untitled Knowledge"
MAX_TITLE_WORDS = 10

TITLE_PROMPT = """Write a short title for the following piece of knowledge.
The title must state the purpose of the content in at most {max_words} words.
Respond with the title only, without quotes or any other text.

Content: "{content}"
"""

_QUOTE_CHARS = "\"'`“”‘’"


def clean_title(raw_output: str) -> str:
    """Strip fences, quotes and trailing punctuation; keep the first line."""
    text = strip_llm_fences(raw_output)
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return ""

    title = re.sub(r"^(title\s*:\s*)", "", lines[0], flags=re.IGNORECASE)
    title = title.strip().strip(_QUOTE_CHARS).strip().rstrip(".")
    words = title.split()
    return " ".join(words[:MAX_TITLE_WORDS])


class TitleGenerator:
    """Generates a purpose-stating title; never raises."""

    def __init__(self, generator: GenerationClient | None, content_chars: int = 2000):
        self.generator = generator
        self.content_chars = content_chars

    async def generate(self, content: str) -> str:
        if self.generator is None:
            return UNTITLED

        try:
            raw_output = await self.generator.complete_async(
                TITLE_PROMPT.format(max_words=MAX_TITLE_WORDS, content=content[: self.content_chars]),
                max_tokens=40,
            )
        except Exception as e:
            logger.warning(f"Title generation failed: {e}")
            return UNTITLED

        return clean_title(raw_output) or UNTITLED
