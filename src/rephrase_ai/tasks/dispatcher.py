"""Validate task requests and route them through prompt, provider and parser."""

from __future__ import annotations

import logging

from rephrase_ai.llm.parsing import parse_structured
from rephrase_ai.llm.provider import LLMProvider
from rephrase_ai.stats.counter import UsageCounter
from rephrase_ai.tasks.models import (
    DetectionResult,
    DetectOutcome,
    HumanizeOutcome,
    PlagiarismResult,
    PlagiarizeOutcome,
    ResearchOutcome,
    ResearchResult,
    TaskKind,
    TaskRequest,
    TaskResult,
)
from rephrase_ai.tasks.prompts import (
    build_audit_prompt,
    build_detection_prompt,
    build_research_prompt,
    build_rewrite_prompt,
)

logger = logging.getLogger(__name__)

DEFAULT_WORD_LIMIT = 200


class TaskInputError(ValueError):
    """The request itself is invalid; never retried."""


class TextTooLongError(TaskInputError):
    def __init__(self, word_count: int, limit: int) -> None:
        super().__init__(f"Input text exceeds the {limit}-word limit.")
        self.word_count = word_count
        self.limit = limit


class EmptyTopicError(TaskInputError):
    def __init__(self) -> None:
        super().__init__("Research topic cannot be empty")


class UnknownTaskKindError(TaskInputError):
    def __init__(self, action: str) -> None:
        super().__init__("Invalid action specified")
        self.action = action


def count_words(text: str) -> int:
    """Whitespace-delimited token count."""

    return len(text.split())


class TaskDispatcher:
    """Run one task end to end.

    Input errors are raised before the usage counter is touched; provider and
    parser errors propagate unchanged.
    """

    def __init__(
        self,
        *,
        provider: LLMProvider,
        counter: UsageCounter,
        word_limit: int = DEFAULT_WORD_LIMIT,
    ) -> None:
        self._provider = provider
        self._counter = counter
        self._word_limit = word_limit

    def validate(self, request: TaskRequest) -> TaskKind:
        """Check a request and resolve its task kind.

        Raises:
            TextTooLongError: Non-research text over the word limit.
            EmptyTopicError: Research with an empty topic.
            UnknownTaskKindError: Any other action.
        """

        if request.action != TaskKind.RESEARCH.value:
            words = count_words(request.text)
            if words > self._word_limit:
                raise TextTooLongError(words, self._word_limit)
        elif not request.text.strip():
            raise EmptyTopicError()

        try:
            return TaskKind(request.action)
        except ValueError:
            raise UnknownTaskKindError(request.action) from None

    def dispatch(self, request: TaskRequest) -> TaskResult:
        kind = self.validate(request)
        self._counter.increment(kind)

        logger.info(
            "Dispatching task",
            extra={"action": kind.value, "words": count_words(request.text)},
        )

        if kind is TaskKind.HUMANIZE:
            params = build_rewrite_prompt(
                request.text,
                tone=request.tone,
                complexity=request.complexity,
                dialect=request.dialect,
                freeze_keywords=request.freeze_keywords,
            )
            return HumanizeOutcome(text=self._provider.run(params).strip())

        if kind is TaskKind.DETECT:
            raw = self._provider.run(build_detection_prompt(request.text))
            return DetectOutcome(detection_result=parse_structured(raw, DetectionResult))

        if kind is TaskKind.PLAGIARIZE:
            raw = self._provider.run(build_audit_prompt(request.text))
            return PlagiarizeOutcome(plagiarism_result=parse_structured(raw, PlagiarismResult))

        raw = self._provider.run(build_research_prompt(request.text.strip()))
        return ResearchOutcome(research_result=parse_structured(raw, ResearchResult))
