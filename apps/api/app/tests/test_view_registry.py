from __future__ import annotations

from app.api.v1.schemas import AccountAnalysis, Contact
from app.services.hierarchy import build_chart
from app.services.views.registry import ViewRegistry

ANALYSIS = AccountAnalysis(
    account_name="Acme",
    contacts=[Contact(id="a", seniority_rank=1), Contact(id="b", manager_id="a", seniority_rank=2)],
)


def _builder(calls: list[str], department: str | None = None):
    def _build():
        calls.append("build")
        return build_chart(ANALYSIS, department)

    return _build


def test_snapshot_reuses_build_until_revision_changes() -> None:
    registry = ViewRegistry()
    calls: list[str] = []

    first = registry.snapshot("an-1", 1, None, _builder(calls))
    second = registry.snapshot("an-1", 1, None, _builder(calls))
    third = registry.snapshot("an-1", 2, None, _builder(calls))

    assert calls == ["build", "build"]
    assert first.chart.build_id == second.chart.build_id
    assert third.chart.build_id != first.chart.build_id
    assert first.state == "built"


def test_reposition_marks_view_dirty_and_survives_snapshot() -> None:
    registry = ViewRegistry()
    snapshot = registry.snapshot("an-1", 1, None, _builder([]))
    original = snapshot.positions["b"]

    outcome = registry.reposition("an-1", snapshot.chart.build_id, "b", 30, 10, 1.0)
    assert outcome.applied
    assert outcome.state == "dirty"
    assert (outcome.node.x, outcome.node.y) == (original.x + 30, original.y + 10)

    again = registry.snapshot("an-1", 1, None, _builder([]))
    assert again.state == "dirty"
    assert again.manual_ids == frozenset({"b"})
    assert again.positions["b"].x == original.x + 30


def test_rebuild_discards_manual_positions() -> None:
    registry = ViewRegistry()
    snapshot = registry.snapshot("an-1", 1, None, _builder([]))
    registry.reposition("an-1", snapshot.chart.build_id, "b", 30, 10)

    rebuilt = registry.snapshot("an-1", 1, "General", _builder([], "General"))
    assert rebuilt.state == "built"
    assert rebuilt.manual_ids == frozenset()


def test_reposition_against_stale_build_is_discarded() -> None:
    registry = ViewRegistry()
    stale = registry.snapshot("an-1", 1, None, _builder([]))
    fresh = registry.snapshot("an-1", 2, None, _builder([]))

    outcome = registry.reposition("an-1", stale.chart.build_id, "b", 30, 10)
    assert not outcome.applied
    assert outcome.state == "built"
    assert registry.snapshot("an-1", 2, None, _builder([])).positions == fresh.positions


def test_reposition_ignores_root_unknown_contacts_and_unbuilt_views() -> None:
    registry = ViewRegistry()
    assert registry.reposition("nothing", "build", "a", 1, 1).state == "unbuilt"

    snapshot = registry.snapshot("an-1", 1, None, _builder([]))
    assert not registry.reposition("an-1", snapshot.chart.build_id, snapshot.chart.root_id, 1, 1).applied
    assert not registry.reposition("an-1", snapshot.chart.build_id, "ghost", 1, 1).applied


def test_invalidate_forces_rebuild() -> None:
    registry = ViewRegistry()
    calls: list[str] = []
    registry.snapshot("an-1", 1, None, _builder(calls))
    registry.invalidate("an-1")
    registry.snapshot("an-1", 1, None, _builder(calls))
    assert calls == ["build", "build"]
