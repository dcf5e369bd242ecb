"""Text chunking utilities for knowledge embedding."""

from typing import Any


def chunk_text(text: str, chunk_size: int = 500) -> list[dict[str, Any]]:
    """
    Split text into fixed-size, non-overlapping chunks.

    The text is walked in strides of ``chunk_size`` characters. Chunks ignore
    word boundaries and the last chunk may be shorter. Joining the ``content``
    of every chunk in order reproduces the input exactly.

    Args:
        text: Text to chunk
        chunk_size: Maximum characters per chunk

    Returns:
        List of chunk dicts with:
            - chunk_index: int (0-based, contiguous)
            - content: str
            - start_char: int
            - end_char: int

    Raises:
        ValueError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    if not text:
        return []

    chunks = []
    for chunk_index, start in enumerate(range(0, len(text), chunk_size)):
        end = min(start + chunk_size, len(text))
        chunks.append(
            {
                "chunk_index": chunk_index,
                "content": text[start:end],
                "start_char": start,
                "end_char": end,
            }
        )

    return chunks
