"""Decode structured (JSON) replies from the model."""

from __future__ import annotations

import logging
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*\n?(?P<body>.*?)\n?[ \t]*```$", re.DOTALL | re.IGNORECASE)


class MalformedStructuredResponse(ValueError):
    """The model's reply could not be decoded into the expected shape.

    The message is deliberately generic; `raw_text` keeps the reply for logs.
    """

    def __init__(self, raw_text: str, target: str) -> None:
        super().__init__(f"The model returned a malformed {target} response")
        self.raw_text = raw_text
        self.target = target


def strip_code_fence(raw_text: str) -> str:
    """Trim whitespace and remove a surrounding ``` / ```json fence, if any."""

    text = raw_text.strip()
    match = _FENCE_RE.match(text)
    if match is None:
        return text
    return match.group("body").strip()


def parse_structured(raw_text: str, model: type[ModelT]) -> ModelT:
    """Decode a model reply as JSON into `model`.

    Raises:
        MalformedStructuredResponse: If the text is not valid JSON for `model`.
    """

    try:
        return model.model_validate_json(strip_code_fence(raw_text))
    except ValidationError as e:
        logger.error(
            "Malformed structured response",
            extra={"target": model.__name__, "raw_text": raw_text, "errors": e.error_count()},
        )
        raise MalformedStructuredResponse(raw_text, model.__name__) from e
