"""Markdown preview rendering endpoint."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from fednotes.api.deps import RendererDep

router = APIRouter()


class PreviewRequest(BaseModel):
    """Markdown to render."""

    content: str = Field(default="", description="Full note content")


@router.post("/preview")
def render_preview(request: PreviewRequest, renderer: RendererDep) -> dict[str, Any]:
    """
    Render markdown to HTML.

    Top-level blocks carry ``data-md-line-start``/``data-md-line-end``
    attributes; ``anchors`` lists the same ranges in document order.
    """
    rendered = renderer.render(request.content)
    return {
        "html": rendered.html,
        "total_lines": rendered.total_lines,
        "anchors": [
            {"line_start": a.line_start, "line_end": a.line_end, "tag": a.tag}
            for a in rendered.anchors
        ],
    }
