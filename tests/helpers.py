"""Test doubles and builders shared across suites."""

from __future__ import annotations

from specbook.analysis.models import AnalysisRequest, ServiceResponse
from specbook.store.models import ObjectDetail


class FakeAnalysisService:
    """Records requests and replays a canned response (or raises)."""

    def __init__(self, raw_text: str = '{"entries": []}', input_tokens: int = 120, output_tokens: int = 40,
                 error: BaseException | None = None, model: str = "fake-model"):
        self.raw_text = raw_text
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.error = error
        self.model = model
        self.requests: list[AnalysisRequest] = []

    async def complete(self, request: AnalysisRequest) -> ServiceResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return ServiceResponse(
            raw_text=self.raw_text,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            model=self.model,
        )


def make_detail(object_id: str, title: str | None = None, parent_id: str | None = None,
                content: str = "", **kwargs) -> ObjectDetail:
    """Helper to build an ObjectDetail for tests."""
    return ObjectDetail(
        id=object_id,
        title=title or f"Object {object_id}",
        parent_id=parent_id,
        content=content,
        **kwargs,
    )
