"""Rephrase AI.

A small FastAPI service that wraps the Gemini API with:
- text humanizing, AI-likelihood detection, similarity audits and topic research
- bounded retry with exponential backoff on the outbound call
- live usage counters pushed to WebSocket listeners
"""

__version__ = "0.1.0"

from rephrase_ai.config import RephraseSettings

__all__ = ["__version__", "RephraseSettings"]
