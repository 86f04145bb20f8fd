"""Upstream chat completion access.

Responsibilities:
    - Injecting retrieved context as a system message
    - Opening streamed completions and forwarding their bytes
"""

from chat_playground.completion.client import CompletionClient, forward_stream
from chat_playground.completion.prompting import build_context_message, inject_context

__all__ = ["CompletionClient", "build_context_message", "forward_stream", "inject_context"]
