"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the task dispatcher and the
broadcast hub.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from rephrase_ai import __version__
from rephrase_ai.config import RephraseSettings
from rephrase_ai.llm.errors import GenerationError
from rephrase_ai.llm.gemini_provider import GeminiProvider
from rephrase_ai.llm.parsing import MalformedStructuredResponse
from rephrase_ai.llm.provider import LLMProvider
from rephrase_ai.server.models import ApiError
from rephrase_ai.stats.counter import UsageCounter
from rephrase_ai.stats.hub import BroadcastHub
from rephrase_ai.tasks.dispatcher import TaskDispatcher, TaskInputError
from rephrase_ai.tasks.models import TaskRequest

logger = logging.getLogger(__name__)


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(ApiError(error=message).model_dump(), status_code=status_code)


async def _read_task(request: Request) -> TaskRequest:
    """Decode the body as JSON whatever the declared Content-Type."""

    body = await request.body()
    try:
        return TaskRequest.model_validate_json(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


def create_app(
    settings: RephraseSettings | None = None,
    *,
    provider: LLMProvider | None = None,
) -> FastAPI:
    if settings is None:
        settings = RephraseSettings()
    owns_provider = provider is None
    if provider is None:
        provider = GeminiProvider(settings)

    counter = UsageCounter()
    hub = BroadcastHub(counter, interval_seconds=settings.stats_interval_seconds)
    dispatcher = TaskDispatcher(provider=provider, counter=counter, word_limit=settings.word_limit)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        hub.start()
        try:
            yield
        finally:
            await hub.stop()
            if owns_provider and isinstance(provider, GeminiProvider):
                provider.close()

    app = FastAPI(
        title="Rephrase AI",
        version=__version__,
        description="Humanize, detect, audit and research text via the Gemini API.",
        lifespan=lifespan,
    )

    # Expose shared state for request handlers and tests that want to read it.
    app.state.settings = settings
    app.state.counter = counter
    app.state.hub = hub

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(_request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected invalid payload", extra={"errors": len(exc.errors())})
        return _error_response("Invalid JSON payload", 400)

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post("/api/process", response_model=None)
    def process(task: TaskRequest = Depends(_read_task)) -> JSONResponse:
        # Sync endpoint: runs in the threadpool, so retry backoff only blocks this worker.
        try:
            result = dispatcher.dispatch(task)
        except TaskInputError as e:
            logger.info("Rejected task", extra={"action": task.action, "error": str(e)})
            return _error_response(str(e), 400)
        except (GenerationError, MalformedStructuredResponse) as e:
            logger.error(
                "Task failed",
                extra={"action": task.action, "error_type": type(e).__name__, "error": str(e)},
            )
            return _error_response(str(e), 500)

        return JSONResponse(result.model_dump(mode="json"), status_code=200)

    @app.api_route(
        "/api/process",
        methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
        include_in_schema=False,
        response_model=None,
    )
    def process_wrong_method() -> JSONResponse:
        return _error_response("Invalid request method", 405)

    @app.websocket("/ws")
    async def stats_stream(websocket: WebSocket) -> None:
        await websocket.accept()
        await hub.register(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            await hub.unregister(websocket)

    _maybe_mount_web(app, settings)
    return app


def _maybe_mount_web(app: FastAPI, settings: RephraseSettings) -> None:
    """Serve the static browser client from the same process, when present.

    Mounted last so the API and WebSocket routes take precedence.
    """

    web_root = settings.web_root
    if not web_root.is_dir():
        logger.info("Static web root not found; UI disabled", extra={"web_root": str(web_root)})
        return
    app.mount("/", StaticFiles(directory=web_root, html=True), name="web")
