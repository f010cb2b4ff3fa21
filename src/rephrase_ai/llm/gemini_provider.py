"""Gemini `generateContent` provider implementation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import requests

from rephrase_ai.config import RephraseSettings
from rephrase_ai.llm.errors import (
    EmptyResponseError,
    GenerationStoppedError,
    ProviderBusyError,
    ProviderNetworkError,
    ProviderRemoteError,
    TransientProviderError,
)
from rephrase_ai.llm.provider import GenerationParameters, LLMProvider

logger = logging.getLogger(__name__)

# Provider defaults would block legitimate rewrite/detection inputs.
SAFETY_SETTINGS: tuple[dict[str, str], ...] = (
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
)

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 503})
NORMAL_FINISH_REASONS: frozenset[str] = frozenset({"STOP", "MAX_TOKENS"})

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7


def build_request_body(params: GenerationParameters) -> dict[str, Any]:
    """Build the `generateContent` request envelope for one call."""

    return {
        "contents": [{"role": "user", "parts": [{"text": params.prompt}]}],
        "generationConfig": {
            "temperature": params.temperature,
            "maxOutputTokens": params.max_output_tokens,
        },
        "safetySettings": [dict(s) for s in SAFETY_SETTINGS],
    }


def extract_text(payload: dict[str, Any]) -> str:
    """Unwrap the text of the first candidate.

    Text wins over the finish reason: a candidate that stopped for an abnormal
    reason but still produced text is returned as-is.

    Raises:
        GenerationStoppedError: No text and an abnormal finish/block reason.
        EmptyResponseError: No candidate or no text.
    """

    candidates = payload.get("candidates") or []
    if not candidates:
        block_reason = (payload.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise GenerationStoppedError(str(block_reason))
        raise EmptyResponseError()

    first = candidates[0] or {}
    finish_reason = str(first.get("finishReason") or "")
    logger.debug("Gemini finish reason", extra={"finish_reason": finish_reason})

    parts = (first.get("content") or {}).get("parts") or []
    text = "".join(str(part.get("text") or "") for part in parts if isinstance(part, dict))

    if text:
        if finish_reason and finish_reason not in NORMAL_FINISH_REASONS:
            logger.warning(
                "Returning partial text despite abnormal finish reason",
                extra={"finish_reason": finish_reason, "chars": len(text)},
            )
        return text

    if finish_reason and finish_reason not in NORMAL_FINISH_REASONS:
        raise GenerationStoppedError(finish_reason)
    raise EmptyResponseError()


class GeminiProvider(LLMProvider):
    """Gemini REST API provider with bounded exponential-backoff retry."""

    def __init__(
        self,
        settings: RephraseSettings,
        *,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the Gemini provider.

        Args:
            settings: Service settings (API key, model, timeout, retry budget).
            session: Optional pre-built HTTP session (tests inject a fake).
            sleep: Backoff sleep function (tests inject a recorder).

        Raises:
            ValueError: If the API key is not provided.
        """
        if not settings.gemini_api_key:
            raise ValueError("Gemini API key is required")

        self.model = settings.gemini_model
        self.timeout = settings.request_timeout_seconds
        self.max_attempts = settings.max_attempts
        self.initial_backoff = settings.initial_backoff_seconds
        self._url = f"{settings.gemini_base_url.rstrip('/')}/models/{self.model}:generateContent"
        self._sleep = sleep

        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "x-goog-api-key": settings.gemini_api_key,
                "User-Agent": "rephrase-ai",
            }
        )

        logger.info("Gemini provider initialized", extra={"model": self.model})

    def close(self) -> None:
        self._session.close()

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text using the Gemini API.

        Args:
            prompt: The input prompt.
            max_tokens: Maximum output tokens (defaults to 1024).
            temperature: Sampling temperature (defaults to 0.7).
            **kwargs: Unused; accepted for interface compatibility.

        Returns:
            Text of the first candidate.
        """
        params = GenerationParameters(
            prompt=prompt,
            max_output_tokens=max_tokens if max_tokens is not None else DEFAULT_MAX_TOKENS,
            temperature=temperature if temperature is not None else DEFAULT_TEMPERATURE,
        )

        logger.debug(
            "Generating completion",
            extra={
                "prompt_chars": len(prompt),
                "max_output_tokens": params.max_output_tokens,
                "temperature": params.temperature,
            },
        )

        resp = self._post_with_retry(build_request_body(params))

        if resp.status_code != 200:
            raise ProviderRemoteError(resp.status_code, resp.text)

        try:
            payload = resp.json()
        except ValueError as e:
            raise ProviderRemoteError(resp.status_code, resp.text) from e
        if not isinstance(payload, dict):
            raise ProviderRemoteError(resp.status_code, resp.text)

        text = extract_text(payload)
        logger.debug("Generated completion", extra={"chars": len(text)})
        return text

    def _post_with_retry(self, body: dict[str, Any]) -> requests.Response:
        """POST the envelope, retrying only transport failures and busy statuses.

        Returns the first response that is not retryable. Raises the last
        transient error once the attempt budget is spent.
        """

        backoff = self.initial_backoff
        last_error: TransientProviderError | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                resp = self._session.post(self._url, json=body, timeout=self.timeout)
            except requests.RequestException as e:
                last_error = ProviderNetworkError(f"Network error calling Gemini: {e}")
                last_error.__cause__ = e
                reason = "network error"
            else:
                if resp.status_code not in RETRYABLE_STATUS_CODES:
                    return resp
                last_error = ProviderBusyError(resp.status_code)
                reason = f"status {resp.status_code}"
                resp.close()

            if attempt == self.max_attempts:
                break

            logger.warning(
                "Gemini call failed; retrying",
                extra={
                    "attempt": attempt,
                    "max_attempts": self.max_attempts,
                    "reason": reason,
                    "backoff_seconds": backoff,
                },
            )
            self._sleep(backoff)
            backoff *= 2

        logger.error(
            "Gemini call failed after retries",
            extra={"attempts": self.max_attempts, "error": str(last_error)},
        )
        if last_error is None:
            raise RuntimeError("max_attempts must be at least 1")
        raise last_error
