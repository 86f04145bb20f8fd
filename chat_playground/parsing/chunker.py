"""Sliding-window text chunking for embedding.

Splits extracted text into overlapping, size-bounded character windows.
Pure function: identical inputs always produce identical chunks.
"""

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200
DEFAULT_MAX_CHUNKS = 50


def chunk_text(
    text: str,
    size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
    max_chunks: int = DEFAULT_MAX_CHUNKS,
) -> list[str]:
    """Split text into overlapping chunks.

    A window of ``size`` characters slides across the trimmed text,
    advancing by ``size - overlap`` each step. Each window is trimmed and
    kept only if non-empty.

    Args:
        text: Text to split.
        size: Window size in characters.
        overlap: Characters shared between consecutive windows.
        max_chunks: Upper bound on the number of chunks returned.

    Returns:
        Trimmed, non-empty chunks in document order. Empty for blank input.

    Raises:
        ValueError: If the parameters would stall or make no progress.
    """
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    if overlap < 0 or overlap >= size:
        raise ValueError("Chunk overlap must be non-negative and smaller than chunk size")
    if max_chunks < 1:
        raise ValueError("max_chunks must be at least 1")

    if not text or not text.strip():
        return []

    clean_text = text.strip()
    step = size - overlap
    chunks: list[str] = []
    start = 0

    while start < len(clean_text) and len(chunks) < max_chunks:
        end = min(start + size, len(clean_text))
        window = clean_text[start:end].strip()
        if window:
            chunks.append(window)
        if end == len(clean_text):
            break
        start += step

    return chunks
