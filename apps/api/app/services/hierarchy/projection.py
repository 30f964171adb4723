"""Drawable primitives for a built chart.

Boxes are anchored at their top-left corner with the layout coordinate at
the box center. Connectors are orthogonal paths from the bottom-center of
the manager box to the top-center of the report box, turning at the
vertical midpoint. The synthetic root is neither boxed nor connected.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from app.api.v1.schemas import Contact
from app.services.hierarchy.layout import PositionedNode
from app.services.hierarchy.pipeline import Chart


@dataclass(frozen=True)
class Box:
    id: str
    x: float
    y: float
    width: float
    height: float
    contact: Contact


@dataclass(frozen=True)
class Connector:
    source_id: str
    target_id: str
    path: str


@dataclass(frozen=True)
class Projection:
    root_id: str
    boxes: tuple[Box, ...]
    connectors: tuple[Connector, ...]


def _num(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0")


def connector_path(source: PositionedNode, target: PositionedNode, node_height: float) -> str:
    source_y = source.y + node_height / 2
    target_y = target.y - node_height / 2
    mid_y = (source_y + target_y) / 2
    return f"M{_num(source.x)},{_num(source_y)} V{_num(mid_y)} H{_num(target.x)} V{_num(target_y)}"


def _connector(chart: Chart, positions: Mapping[str, PositionedNode], source_id: str, target_id: str) -> Connector:
    return Connector(
        source_id=source_id,
        target_id=target_id,
        path=connector_path(positions[source_id], positions[target_id], chart.params.node_height),
    )


def connectors_for(chart: Chart, positions: Mapping[str, PositionedNode], node_id: str) -> list[Connector]:
    """Connectors touching ``node_id``: the one to its manager, then one per report."""
    node = chart.tree.node(node_id)
    connectors: list[Connector] = []
    if node.parent_id is not None and node.parent_id != chart.root_id:
        connectors.append(_connector(chart, positions, node.parent_id, node_id))
    for child_id in node.children:
        connectors.append(_connector(chart, positions, node_id, child_id))
    return connectors


def project_chart(chart: Chart, positions: Mapping[str, PositionedNode] | None = None) -> Projection:
    positions = positions if positions is not None else chart.positions
    width = chart.params.node_width
    height = chart.params.node_height

    boxes: list[Box] = []
    connectors: list[Connector] = []
    for node in chart.tree:
        if node.id == chart.root_id:
            continue
        point = positions[node.id]
        boxes.append(
            Box(
                id=node.id,
                x=point.x - width / 2,
                y=point.y - height / 2,
                width=width,
                height=height,
                contact=node.contact,
            )
        )
        if node.parent_id is not None and node.parent_id != chart.root_id:
            connectors.append(_connector(chart, positions, node.parent_id, node.id))

    return Projection(root_id=chart.root_id, boxes=tuple(boxes), connectors=tuple(connectors))
