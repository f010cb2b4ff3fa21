#!/usr/bin/env python3
"""Programmatic task dispatch example.

This demonstrates using the service components directly, without the server:

* load settings from `.env` (GEMINI_API_KEY is required)
* run one task through the dispatcher
* print the tagged result and the usage counters
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from rephrase_ai.config import RephraseSettings
from rephrase_ai.llm.gemini_provider import GeminiProvider
from rephrase_ai.logging import configure_logging
from rephrase_ai.stats.counter import UsageCounter
from rephrase_ai.tasks.dispatcher import TaskDispatcher
from rephrase_ai.tasks.models import TaskRequest


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one Rephrase AI task (programmatic example).")
    parser.add_argument(
        "--action",
        default="detect",
        help="One of: humanize, detect, plagiarize, research",
    )
    parser.add_argument("--text", required=True, help="Input text (or topic for research)")
    parser.add_argument("--tone", default="friendly", help="Tone used by 'humanize'")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = RephraseSettings()
    configure_logging(settings.log_level)

    counter = UsageCounter()
    provider = GeminiProvider(settings)
    try:
        dispatcher = TaskDispatcher(provider=provider, counter=counter, word_limit=settings.word_limit)
        result = dispatcher.dispatch(TaskRequest(text=args.text, action=args.action, tone=args.tone))
    finally:
        provider.close()

    print(json.dumps(result.model_dump(mode="json"), indent=2))
    print(json.dumps(counter.snapshot().to_message()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
