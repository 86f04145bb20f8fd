"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - parsing/: Text extraction and chunking logic
    - rag/: Embeddings, document store, retrieval, sessions and ingestion
    - completion/: Prompt assembly and streamed completions
    - config: Settings loading and validation

Follows single responsibility per test function. Leverages pytest-check
for multiple assertions per test.
"""
