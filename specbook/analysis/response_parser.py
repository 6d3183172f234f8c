"""Safe parsing of analysis responses."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from .models import AnalysisResult, AnalysisStatus, RelatedFile

logger = logging.getLogger(__name__)

PARSE_ERROR_ID = "parse-error"
PARSE_ERROR_TITLE = "Parse Error"
RAW_PREVIEW_CHARS = 200

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"```\s*$")

_VALID_STATUSES = {s.value for s in AnalysisStatus}


class MalformedResponseError(ValueError):
    """The response is not the expected structured document."""
    pass


def strip_code_fence(raw: str) -> str:
    """Remove an optional ```json ... ``` wrapper."""
    text = raw.strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def _parse_status(value: Any) -> AnalysisStatus:
    if value in _VALID_STATUSES:
        return AnalysisStatus(value)
    return AnalysisStatus.UNKNOWN


def _parse_files(items: Any) -> list[RelatedFile]:
    if not isinstance(items, list):
        return []
    files = []
    for item in items:
        try:
            files.append(RelatedFile.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed file reference {item!r}: {e.error_count()} error(s)")
    return files


def _parse_entry(item: dict[str, Any]) -> AnalysisResult:
    related = _parse_files(item.get("relatedFiles"))
    impl_files = [f for f in related if f.type != "test"] + _parse_files(item.get("implFiles"))
    test_files = [f for f in related if f.type == "test"] + _parse_files(item.get("testFiles"))

    title = item.get("objectTitle")
    object_id = item.get("objectId")
    return AnalysisResult(
        object_id=str(object_id) if object_id is not None else "",
        object_title=str(title) if title is not None else "",
        status=_parse_status(item.get("status")),
        summary=str(item.get("summary") or ""),
        impl_files=impl_files,
        test_files=test_files,
    )


def _entries_of(data: Any) -> list[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("entries", "mappings"):
            if isinstance(data.get(key), list):
                return data[key]
    raise MalformedResponseError("expected an object with an 'entries' list")


def parse_error_result(raw: str) -> AnalysisResult:
    """The single stand-in result for an unparsable response."""
    return AnalysisResult(
        object_id=PARSE_ERROR_ID,
        object_title=PARSE_ERROR_TITLE,
        status=AnalysisStatus.UNKNOWN,
        summary=f"Failed to parse AI response: {raw[:RAW_PREVIEW_CHARS]}",
        resolved=False,
    )


def parse_analysis_response(raw: str) -> list[AnalysisResult]:
    """
    Parse an analysis response into per-object results.

    Never raises: a response that is not valid JSON of the expected shape
    becomes exactly one "unknown" result quoting the first 200 characters.

    Args:
        raw: Raw response text

    Returns:
        Results in response order, object ids as echoed (not yet resolved)
    """
    try:
        data = json.loads(strip_code_fence(raw))
        items = _entries_of(data)
    except (json.JSONDecodeError, RecursionError, MalformedResponseError) as e:
        logger.warning(f"Analysis response is not valid structured data: {e}")
        return [parse_error_result(raw)]

    results = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object analysis entry: {item!r}")
            continue
        results.append(_parse_entry(item))
    return results


__all__ = [
    "PARSE_ERROR_ID",
    "parse_analysis_response",
    "parse_error_result",
    "strip_code_fence",
]
