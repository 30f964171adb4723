from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, replace

from app.api.v1.schemas import AccountAnalysis
from app.services.hierarchy.layout import PositionedNode

logger = logging.getLogger(__name__)


def direct_reports(analysis: AccountAnalysis, contact_id: str) -> list[str]:
    return [contact.id for contact in analysis.contacts if contact.manager_id == contact_id and contact.id != contact_id]


def delete_contact(analysis: AccountAnalysis, contact_id: str) -> AccountAnalysis:
    """Remove a contact and bridge its direct reports to its own manager.

    Returns ``analysis`` itself when no contact has ``contact_id``. Every
    contact sharing the id is removed; the first one supplies the manager the
    reports are bridged to.
    """
    target = next((contact for contact in analysis.contacts if contact.id == contact_id), None)
    if target is None:
        return analysis

    bridge_to = target.manager_id if target.manager_id != contact_id else None
    contacts = []
    for contact in analysis.contacts:
        if contact.id == contact_id:
            continue
        if contact.manager_id == contact_id:
            contact = contact.model_copy(update={"manager_id": bridge_to})
        contacts.append(contact)

    logger.info(
        "contact_deleted",
        extra={"contact_id": contact_id, "bridged_to": bridge_to, "remaining_count": len(contacts)},
    )
    return analysis.model_copy(update={"contacts": contacts})


@dataclass(frozen=True)
class Point:
    x: float
    y: float


class OverrideMap:
    """Manually dragged positions, kept apart from the computed layout."""

    def __init__(self) -> None:
        self._points: dict[str, Point] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[str]:
        return iter(self._points)

    def get(self, node_id: str) -> Point | None:
        return self._points.get(node_id)

    def set(self, node_id: str, point: Point) -> None:
        self._points[node_id] = point

    def clear(self) -> None:
        self._points.clear()


def reposition(
    positions: Mapping[str, PositionedNode],
    overrides: OverrideMap,
    node_id: str,
    dx: float,
    dy: float,
    zoom: float = 1.0,
) -> PositionedNode | None:
    """Move ``node_id`` by a screen-space delta and record it in ``overrides``.

    The delta is divided by ``zoom`` so the node follows the pointer at any
    zoom level. Returns None, leaving ``overrides`` untouched, when the node
    is not part of ``positions``.
    """
    if zoom <= 0:
        raise ValueError("zoom must be positive")
    node = positions.get(node_id)
    if node is None:
        return None

    current = overrides.get(node_id) or Point(node.x, node.y)
    moved = Point(current.x + dx / zoom, current.y + dy / zoom)
    overrides.set(node_id, moved)
    return replace(node, x=moved.x, y=moved.y)


def merge_positions(
    positions: Mapping[str, PositionedNode],
    overrides: OverrideMap,
) -> dict[str, PositionedNode]:
    merged: dict[str, PositionedNode] = {}
    for node_id, node in positions.items():
        point = overrides.get(node_id)
        merged[node_id] = replace(node, x=point.x, y=point.y) if point else node
    return merged
