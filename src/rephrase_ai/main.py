"""CLI entrypoint for Rephrase AI.

Subcommands:
- `serve`: run the HTTP/WebSocket server under uvicorn
- `run`: dispatch a single task and print the JSON result
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from rephrase_ai import __version__
from rephrase_ai.config import RephraseSettings
from rephrase_ai.llm.errors import GenerationError
from rephrase_ai.llm.gemini_provider import GeminiProvider
from rephrase_ai.llm.parsing import MalformedStructuredResponse
from rephrase_ai.logging import configure_logging
from rephrase_ai.stats.counter import UsageCounter
from rephrase_ai.tasks.dispatcher import TaskDispatcher, TaskInputError
from rephrase_ai.tasks.models import TaskKind, TaskRequest

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rephrase",
        description="Humanize, detect, audit and research text via the Gemini API",
    )
    parser.add_argument("--version", action="version", version=f"rephrase-ai {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=None, help="Bind address (default: REPHRASE_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT)")

    run = subparsers.add_parser("run", help="Dispatch one task and print the result as JSON")
    run.add_argument(
        "--action",
        required=True,
        choices=[kind.value for kind in TaskKind],
        help="Task to run",
    )
    run.add_argument("--text", required=True, help="Input text, or the topic for 'research'")
    run.add_argument("--tone", default=None, help="Tone for 'humanize', e.g. 'formal'")
    run.add_argument("--complexity", default=None, help="Audience for 'humanize', e.g. 'general'")
    run.add_argument("--dialect", default=None, help="Dialect for 'humanize', e.g. 'British English'")
    run.add_argument(
        "--freeze-keywords",
        dest="freeze_keywords",
        default=None,
        help="Comma-separated keywords 'humanize' must keep verbatim",
    )

    return parser


def _serve(settings: RephraseSettings, host: str | None, port: int | None) -> int:
    import uvicorn

    from rephrase_ai.server.app import create_app

    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )
    return 0


def _run_task(settings: RephraseSettings, args: argparse.Namespace) -> int:
    provider = GeminiProvider(settings)
    dispatcher = TaskDispatcher(
        provider=provider,
        counter=UsageCounter(),
        word_limit=settings.word_limit,
    )
    request = TaskRequest(
        text=args.text,
        action=args.action,
        tone=args.tone,
        complexity=args.complexity,
        dialect=args.dialect,
        freeze_keywords=args.freeze_keywords,
    )
    try:
        result = dispatcher.dispatch(request)
    except TaskInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (GenerationError, MalformedStructuredResponse) as e:
        logger.error("Task failed", extra={"action": args.action, "error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        provider.close()

    print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = RephraseSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "serve":
        return _serve(settings, args.host, args.port)
    if args.command == "run":
        return _run_task(settings, args)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
