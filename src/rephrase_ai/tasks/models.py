"""Task request and result models."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field


class TaskKind(str, Enum):
    """Supported task kinds, valued by their wire `action` name."""

    HUMANIZE = "humanize"
    DETECT = "detect"
    PLAGIARIZE = "plagiarize"
    RESEARCH = "research"


class TaskRequest(BaseModel):
    """One inbound task.

    `action` stays a plain string so unknown values surface as an input error
    from the dispatcher rather than as a payload decode failure.
    """

    text: str = ""
    action: str = ""
    tone: str | None = None
    complexity: str | None = None
    dialect: str | None = None
    freeze_keywords: str | None = None


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


# Models sometimes answer `null` for an empty list.
StrList = Annotated[list[str], BeforeValidator(_none_as_empty)]


class DetectionResult(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    analysis: str
    red_flags: StrList = Field(default_factory=list)


class PlagiarismMatch(BaseModel):
    snippet: str
    source_description: str
    confidence: float = Field(ge=0.0, le=1.0)


class PlagiarismResult(BaseModel):
    similarity_found: bool
    overall_confidence: float = Field(ge=0.0, le=1.0)
    matches: Annotated[list[PlagiarismMatch], BeforeValidator(_none_as_empty)] = Field(
        default_factory=list
    )


class ResearchResult(BaseModel):
    topic: str
    executive_summary: str
    historical_context: str = ""
    core_concepts: StrList = Field(default_factory=list)
    critiques: StrList = Field(default_factory=list)
    applications: StrList = Field(default_factory=list)


class HumanizeOutcome(BaseModel):
    result_type: Literal["humanize"] = "humanize"
    text: str


class DetectOutcome(BaseModel):
    result_type: Literal["detect"] = "detect"
    detection_result: DetectionResult


class PlagiarizeOutcome(BaseModel):
    result_type: Literal["plagiarize"] = "plagiarize"
    plagiarism_result: PlagiarismResult


class ResearchOutcome(BaseModel):
    result_type: Literal["research"] = "research"
    research_result: ResearchResult


TaskResult = Annotated[
    HumanizeOutcome | DetectOutcome | PlagiarizeOutcome | ResearchOutcome,
    Field(discriminator="result_type"),
]
