"""FastAPI server adapter for Rephrase AI.

Design intent:
- Keep task logic in `rephrase_ai.tasks.*` and provider logic in `rephrase_ai.llm.*`
- Keep server-specific concerns (routing, status codes, WebSocket plumbing) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from rephrase_ai.server.app import create_app
