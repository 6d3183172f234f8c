"""Analysis result models and the external service's request/response types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..store.models import utc_now_iso


class AnalysisStatus(str, Enum):
    """Implementation status reported for one object."""

    IMPLEMENTED = "implemented"
    PARTIAL = "partial"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class LineRange(_CamelModel):
    start: int
    end: int


class RelatedFile(_CamelModel):
    """A source file the analysis ties to an object."""

    file_path: str = Field(alias="filePath")
    description: str = ""
    line_range: LineRange | None = Field(default=None, alias="lineRange")
    type: Literal["impl", "test"] | None = None


class AnalysisResult(_CamelModel):
    """
    One object's analysis, as produced by a scan and stored in the snapshot.

    resolved is False when object_id is the echoed title standing in for an
    id that could not be found in the tree.
    """

    object_id: str = Field(alias="objectId")
    object_title: str = Field(default="", alias="objectTitle")
    status: AnalysisStatus = AnalysisStatus.UNKNOWN
    summary: str = ""
    impl_files: list[RelatedFile] = Field(default_factory=list, alias="implFiles")
    test_files: list[RelatedFile] = Field(default_factory=list, alias="testFiles")
    resolved: bool = True

    def all_files(self) -> list[RelatedFile]:
        """Implementation files followed by test files."""
        return [*self.impl_files, *self.test_files]


class TokenUsage(_CamelModel):
    """Cost accounting for one analysis call."""

    input_tokens: int = Field(default=0, alias="inputTokens")
    output_tokens: int = Field(default=0, alias="outputTokens")
    model: str = ""
    timestamp: str = Field(default_factory=utc_now_iso)


@dataclass
class AnalysisPrompt:
    """System and user prompt for one analysis request."""

    system_prompt: str
    user_prompt: str


@dataclass
class AnalysisRequest:
    """Input to the external analysis service."""

    system_prompt: str
    user_prompt: str
    model: str
    max_tokens: int = 8192
    temperature: float = 0.0


@dataclass
class ServiceResponse:
    """Output of the external analysis service."""

    raw_text: str
    input_tokens: int
    output_tokens: int
    model: str = ""


__all__ = [
    "AnalysisPrompt",
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisStatus",
    "LineRange",
    "RelatedFile",
    "ServiceResponse",
    "TokenUsage",
]
