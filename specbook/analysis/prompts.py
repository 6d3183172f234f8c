"""
Analysis prompt templates.

Renders the object tree as a numbered outline and builds the system/user
prompts sent to the analysis service.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..store.models import TreeNode
from .models import AnalysisPrompt

COMPLETED_GLYPH = "✅"
OPEN_GLYPH = "⬜"
STATE_TAG = " [STATE]"


def render_outline(tree: Sequence[TreeNode], prefix: str = "", depth: int = 0) -> str:
    """
    Render the tree as a numbered outline, depth-first, pre-order.

    Each line reads "<indent><num> <glyph> <title>[ [STATE]]  (id: <id>)"
    where <num> appends ".<position>" to the parent's number and roots are
    numbered 1, 2, ... The indent is two spaces per level.
    """
    lines: list[str] = []
    for position, node in enumerate(tree, start=1):
        num = f"{prefix}.{position}" if prefix else f"{position}"
        indent = "  " * depth
        glyph = COMPLETED_GLYPH if node.completed else OPEN_GLYPH
        state_tag = STATE_TAG if node.is_state else ""
        lines.append(f"{indent}{num} {glyph} {node.title}{state_tag}  (id: {node.id})")
        if node.children:
            lines.append(render_outline(node.children, num, depth + 1))
    return "\n".join(lines)


def build_system_prompt() -> str:
    """Build the system prompt fixing the required response schema."""
    return """You are a code analyst. You will receive a Spec Object Tree that describes the intended objects/features of a software project. Your task is to analyse the project's source code and determine the implementation status of each object.

For each object, determine:
1. **status**: one of "implemented", "partial", "not_found", or "unknown"
2. **summary**: a concise description of how the object is implemented (or why it's not found)
3. **relatedFiles**: an array of related source files, each tagged as implementation ("impl") or test ("test"), with its path, a description and an optional line range

Copy each object's id and title exactly as they appear in the tree.

Respond ONLY with valid JSON matching this schema:
{
  "entries": [
    {
      "objectId": "<id>",
      "objectTitle": "<title>",
      "status": "implemented" | "partial" | "not_found" | "unknown",
      "summary": "<analysis summary>",
      "relatedFiles": [
        {
          "filePath": "<relative file path>",
          "type": "impl" | "test",
          "description": "<how this file relates to the object>",
          "lineRange": { "start": <number>, "end": <number> }  // optional
        }
      ]
    }
  ]
}

Do NOT include any text outside the JSON object."""


def build_user_prompt(
    tree: Sequence[TreeNode],
    workspace_path: str | None = None,
    directory_tree: str | None = None,
) -> str:
    """
    Build the user prompt embedding the outline and workspace context.

    Args:
        tree: Assembled object tree
        workspace_path: Optional project root shown to the model
        directory_tree: Optional ASCII tree of the project's source files
    """
    ws_info = f"\nProject workspace: {workspace_path}" if workspace_path else ""
    dir_info = f"\n\n## Project Files\n\n```\n{directory_tree}\n```" if directory_tree else ""

    return f"""Please analyse the following Spec Object Tree and determine the implementation status of each object in the project.{ws_info}{dir_info}

## Object Tree

{render_outline(tree)}

Respond with the JSON analysis for every object listed above."""


@dataclass
class PromptContext:
    """Optional workspace context embedded in the user prompt."""

    workspace_path: str | None = None
    directory_tree: str | None = None


def build_request(tree: Sequence[TreeNode], context: PromptContext | None = None) -> AnalysisPrompt:
    """Build both prompts for one analysis request."""
    context = context or PromptContext()
    return AnalysisPrompt(
        system_prompt=build_system_prompt(),
        user_prompt=build_user_prompt(tree, context.workspace_path, context.directory_tree),
    )


__all__ = [
    "PromptContext",
    "build_request",
    "build_system_prompt",
    "build_user_prompt",
    "render_outline",
]
