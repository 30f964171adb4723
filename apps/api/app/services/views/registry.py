from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from app.api.v1.schemas import ViewState
from app.services.hierarchy.layout import PositionedNode
from app.services.hierarchy.mutations import OverrideMap, merge_positions, reposition
from app.services.hierarchy.pipeline import Chart

logger = logging.getLogger(__name__)


@dataclass
class ChartView:
    """Working view of one analysis: the last built chart plus dragged positions.

    ``unbuilt`` -> ``built`` on build, ``built`` -> ``dirty`` on reposition,
    and back to ``unbuilt`` whenever the analysis revision or department
    filter no longer matches.
    """

    analysis_id: str
    revision: int = -1
    department: str | None = None
    chart: Chart | None = None
    overrides: OverrideMap = field(default_factory=OverrideMap)
    state: ViewState = "unbuilt"

    def matches(self, revision: int, department: str | None) -> bool:
        return self.chart is not None and self.revision == revision and self.department == department

    def invalidate(self) -> None:
        self.chart = None
        self.overrides.clear()
        self.state = "unbuilt"

    def install(self, chart: Chart, revision: int) -> None:
        self.chart = chart
        self.revision = revision
        self.department = chart.department
        self.overrides.clear()
        self.state = "built"

    def positions(self) -> dict[str, PositionedNode]:
        if self.chart is None:
            return {}
        return merge_positions(self.chart.positions, self.overrides)


@dataclass(frozen=True)
class ViewSnapshot:
    chart: Chart
    positions: dict[str, PositionedNode]
    manual_ids: frozenset[str]
    state: ViewState
    revision: int


@dataclass(frozen=True)
class RepositionOutcome:
    applied: bool
    state: ViewState
    node: PositionedNode | None = None
    chart: Chart | None = None
    positions: dict[str, PositionedNode] | None = None


class ViewRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._views: dict[str, ChartView] = {}

    def _view(self, analysis_id: str) -> ChartView:
        view = self._views.get(analysis_id)
        if view is None:
            view = ChartView(analysis_id=analysis_id)
            self._views[analysis_id] = view
        return view

    def snapshot(
        self,
        analysis_id: str,
        revision: int,
        department: str | None,
        build: Callable[[], Chart],
    ) -> ViewSnapshot:
        """Return the view's chart, rebuilding it when revision or filter changed."""
        with self._lock:
            view = self._view(analysis_id)
            if not view.matches(revision, department):
                view.invalidate()
                view.install(build(), revision)
            assert view.chart is not None
            return ViewSnapshot(
                chart=view.chart,
                positions=view.positions(),
                manual_ids=frozenset(view.overrides),
                state=view.state,
                revision=view.revision,
            )

    def reposition(
        self,
        analysis_id: str,
        build_id: str,
        contact_id: str,
        dx: float,
        dy: float,
        zoom: float = 1.0,
    ) -> RepositionOutcome:
        """Apply a drag to the current build. Stale builds and unknown contacts are ignored."""
        with self._lock:
            view = self._views.get(analysis_id)
            if view is None or view.chart is None:
                return RepositionOutcome(applied=False, state="unbuilt")
            chart = view.chart
            if chart.build_id != build_id or not chart.has_contact(contact_id):
                logger.info(
                    "reposition_discarded",
                    extra={"analysis_id": analysis_id, "build_id": build_id, "contact_id": contact_id},
                )
                return RepositionOutcome(applied=False, state=view.state)

            node = reposition(chart.positions, view.overrides, contact_id, dx, dy, zoom)
            view.state = "dirty"
            return RepositionOutcome(
                applied=node is not None,
                state=view.state,
                node=node,
                chart=chart,
                positions=view.positions(),
            )

    def invalidate(self, analysis_id: str) -> None:
        with self._lock:
            view = self._views.get(analysis_id)
            if view is not None:
                view.invalidate()

    def clear(self) -> None:
        with self._lock:
            self._views.clear()


_registry = ViewRegistry()


def get_view_registry() -> ViewRegistry:
    return _registry
