"""Tree assembly from the flat parent-pointer list."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from .models import ObjectSummary, TreeNode


def assemble_tree(flat: Sequence[ObjectSummary]) -> list[TreeNode]:
    """
    Build the nested tree from flat summaries.

    Roots and children keep the order of `flat`. A parent_id that names no
    known object makes the node a root. Leaves end up with children=None.
    """
    nodes: dict[str, TreeNode] = {}
    for summary in flat:
        nodes[summary.id] = TreeNode(**summary.model_dump(exclude={"children"}), children=[])

    roots: list[TreeNode] = []
    for summary in flat:
        node = nodes[summary.id]
        if summary.parent_id and summary.parent_id in nodes:
            nodes[summary.parent_id].children.append(node)
        else:
            roots.append(node)

    for node in nodes.values():
        if not node.children:
            node.children = None

    return roots


def walk_tree(tree: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """Yield every node depth-first, pre-order."""
    for node in tree:
        yield node
        if node.children:
            yield from walk_tree(node.children)


def flatten_tree(tree: Sequence[TreeNode]) -> list[ObjectSummary]:
    """Inverse of assemble_tree: pre-order list of plain summaries."""
    return [node.summary() for node in walk_tree(tree)]


__all__ = ["assemble_tree", "flatten_tree", "walk_tree"]
