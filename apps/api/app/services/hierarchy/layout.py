"""Tidy tree layout.

Subtrees are placed bottom-up in slot units. Each subtree keeps a contour,
the leftmost and rightmost slot it occupies at every depth below its root.
A sibling is shifted right until it clears the contour of everything placed
before it by at least one slot at every shared depth, and a parent is
centered between its first and last child. A final top-down pass turns the
relative offsets into absolute coordinates, with the root at x = 0.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.core.config import Settings
from app.services.hierarchy.tree import ContactTree

Contour = list[tuple[float, float]]


@dataclass(frozen=True)
class LayoutParams:
    node_width: float = 260.0
    node_height: float = 120.0
    vertical_spacing: float = 200.0
    horizontal_spacing: float = 60.0

    @property
    def slot_width(self) -> float:
        return self.node_width + self.horizontal_spacing

    @property
    def level_height(self) -> float:
        return self.node_height + self.vertical_spacing

    @classmethod
    def from_settings(cls, settings: Settings) -> LayoutParams:
        return cls(
            node_width=settings.layout_node_width,
            node_height=settings.layout_node_height,
            vertical_spacing=settings.layout_vertical_spacing,
            horizontal_spacing=settings.layout_horizontal_spacing,
        )


@dataclass(frozen=True)
class PositionedNode:
    id: str
    x: float
    y: float
    parent_id: str | None
    depth: int


def _place_children(children: tuple[str, ...], contours: dict[str, Contour]) -> tuple[list[float], Contour]:
    merged = list(contours[children[0]])
    offsets = [0.0]
    for child in children[1:]:
        contour = contours[child]
        shared = min(len(merged), len(contour))
        shift = max(merged[d][1] - contour[d][0] for d in range(shared)) + 1.0
        offsets.append(shift)
        for d, (left, right) in enumerate(contour):
            if d < len(merged):
                merged[d] = (merged[d][0], right + shift)
            else:
                merged.append((left + shift, right + shift))
    return offsets, merged


def _relative_offsets(tree: ContactTree) -> dict[str, float]:
    relative: dict[str, float] = {tree.root_id: 0.0}
    contours: dict[str, Contour] = {}

    # reversed pre-order visits every child before its parent
    for node in reversed(list(tree)):
        if not node.children:
            contours[node.id] = [(0.0, 0.0)]
            continue
        offsets, merged = _place_children(node.children, contours)
        center = (offsets[0] + offsets[-1]) / 2
        for child, offset in zip(node.children, offsets):
            relative[child] = offset - center
            del contours[child]
        contours[node.id] = [(0.0, 0.0)] + [(left - center, right - center) for left, right in merged]
    return relative


def layout_tree(tree: ContactTree, params: LayoutParams | None = None) -> dict[str, PositionedNode]:
    """Assign coordinates to every node of ``tree``, the synthetic root included.

    Two nodes at the same depth are always at least one slot
    (``node_width + horizontal_spacing``) apart, and a childless node takes up
    exactly one slot. Output depends only on the tree and the parameters.
    """
    params = params or LayoutParams()
    relative = _relative_offsets(tree)

    slots: dict[str, float] = {}
    positioned: dict[str, PositionedNode] = {}
    for node in tree:
        parent_slot = slots[node.parent_id] if node.parent_id is not None else 0.0
        slot = parent_slot + relative[node.id]
        slots[node.id] = slot
        positioned[node.id] = PositionedNode(
            id=node.id,
            x=slot * params.slot_width,
            y=node.depth * params.level_height,
            parent_id=node.parent_id,
            depth=node.depth,
        )
    return positioned
