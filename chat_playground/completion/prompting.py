"""Prompt assembly for RAG-augmented chat requests."""

from collections.abc import Sequence
from typing import Any

CONTEXT_PREAMBLE = (
    "Use the following context from uploaded documents to answer questions. "
    "If the answer is not in the context, say so clearly."
)
CHUNK_SEPARATOR = "\n\n---\n\n"


def build_context_message(chunks: Sequence[str]) -> dict[str, str]:
    """Build the system message carrying retrieved chunks."""
    return {
        "role": "system",
        "content": f"{CONTEXT_PREAMBLE}\n\nContext:\n{CHUNK_SEPARATOR.join(chunks)}",
    }


def last_user_index(messages: Sequence[dict[str, Any]]) -> int | None:
    """Index of the last user message, or None if there is none."""
    for index in range(len(messages) - 1, -1, -1):
        if messages[index].get("role") == "user":
            return index
    return None


def inject_context(
    messages: Sequence[dict[str, Any]], chunks: Sequence[str]
) -> list[dict[str, Any]]:
    """Insert a context message immediately before the last user message.

    Returns the messages unchanged (as a new list) when there are no chunks
    or no user message.
    """
    result = list(messages)
    index = last_user_index(result)
    if not chunks or index is None:
        return result
    result.insert(index, build_context_message(chunks))
    return result
