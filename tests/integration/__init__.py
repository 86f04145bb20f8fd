"""Integration tests for components working together as a system.

Coverage:
    - Upload with in-process document processing
    - Document processing rejections
    - Streamed chat with and without retrieved context
    - Session cleanup and idle sweeps

Real PDF parsing, chunking, storage and file handling; only the inference
provider is faked.
"""
