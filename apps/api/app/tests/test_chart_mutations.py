from __future__ import annotations

import random

import pytest

from app.api.v1.schemas import AccountAnalysis, Contact
from app.services.hierarchy import (
    LayoutParams,
    OverrideMap,
    Point,
    PositionedNode,
    build_chart,
    delete_contact,
    direct_reports,
    merge_positions,
    reposition,
)


def _analysis(*contacts: Contact) -> AccountAnalysis:
    return AccountAnalysis(account_name="Acme", contacts=list(contacts))


def _chain(analysis: AccountAnalysis, contact_id: str) -> list[str]:
    by_id = {contact.id: contact for contact in analysis.contacts}
    chain = []
    current = by_id[contact_id].manager_id
    while current is not None and current in by_id:
        chain.append(current)
        current = by_id[current].manager_id
    return chain


def test_delete_bridges_reports_to_grand_manager() -> None:
    analysis = _analysis(
        Contact(id="p", seniority_rank=1),
        Contact(id="q", manager_id="p", seniority_rank=2),
        Contact(id="r", manager_id="q", seniority_rank=3),
    )
    updated = delete_contact(analysis, "q")

    assert [contact.id for contact in updated.contacts] == ["p", "r"]
    assert updated.contacts[1].manager_id == "p"
    # input left untouched
    assert analysis.contacts[2].manager_id == "q"

    chart = build_chart(updated)
    assert chart.tree.node("r").parent_id == "p"
    assert chart.tree.node("r").depth == 2


def test_delete_unknown_contact_returns_same_analysis() -> None:
    analysis = _analysis(Contact(id="a"))
    assert delete_contact(analysis, "missing") is analysis


def test_delete_top_level_contact_promotes_reports_to_root() -> None:
    analysis = _analysis(Contact(id="ceo"), Contact(id="vp", manager_id="ceo"), Contact(id="dir", manager_id="vp"))
    updated = delete_contact(analysis, "ceo")

    assert updated.contacts[0].manager_id is None
    assert updated.contacts[1].manager_id == "vp"


def test_delete_self_managed_contact_does_not_leave_self_references() -> None:
    analysis = _analysis(Contact(id="loop", manager_id="loop"), Contact(id="report", manager_id="loop"))
    updated = delete_contact(analysis, "loop")

    assert [contact.id for contact in updated.contacts] == ["report"]
    assert updated.contacts[0].manager_id is None


def test_delete_removes_every_duplicate_of_the_id() -> None:
    analysis = _analysis(Contact(id="dup"), Contact(id="x", manager_id="dup"), Contact(id="dup", title="again"))
    updated = delete_contact(analysis, "dup")
    assert [contact.id for contact in updated.contacts] == ["x"]


def test_direct_reports_lists_only_immediate_reports() -> None:
    analysis = _analysis(Contact(id="a"), Contact(id="b", manager_id="a"), Contact(id="c", manager_id="b"))
    assert direct_reports(analysis, "a") == ["b"]
    assert direct_reports(analysis, "c") == []


@pytest.mark.parametrize("seed", range(20))
def test_delete_preserves_remaining_ancestry(seed: int) -> None:
    rng = random.Random(seed)
    contacts = []
    for index in range(15):
        manager = rng.choice([None] + [f"c{prior}" for prior in range(index)]) if index else None
        contacts.append(Contact(id=f"c{index}", manager_id=manager))
    analysis = _analysis(*contacts)
    victim = f"c{rng.randrange(15)}"

    updated = delete_contact(analysis, victim)

    for contact in updated.contacts:
        before = [ancestor for ancestor in _chain(analysis, contact.id) if ancestor != victim]
        assert _chain(updated, contact.id) == before


def _positions() -> dict[str, PositionedNode]:
    return {
        "root": PositionedNode(id="root", x=0.0, y=0.0, parent_id=None, depth=0),
        "a": PositionedNode(id="a", x=100.0, y=320.0, parent_id="root", depth=1),
    }


def test_reposition_divides_delta_by_zoom() -> None:
    overrides = OverrideMap()
    moved = reposition(_positions(), overrides, "a", dx=40, dy=-20, zoom=2.0)

    assert moved is not None
    assert (moved.x, moved.y) == (120.0, 310.0)
    assert overrides.get("a") == Point(120.0, 310.0)
    assert moved.parent_id == "root"


def test_reposition_accumulates_on_previous_override() -> None:
    overrides = OverrideMap()
    positions = _positions()
    reposition(positions, overrides, "a", dx=10, dy=10)
    moved = reposition(positions, overrides, "a", dx=5, dy=-5)

    assert (moved.x, moved.y) == (115.0, 325.0)
    assert positions["a"].x == 100.0


def test_reposition_unknown_node_is_ignored() -> None:
    overrides = OverrideMap()
    assert reposition(_positions(), overrides, "ghost", dx=1, dy=1) is None
    assert len(overrides) == 0


def test_reposition_rejects_non_positive_zoom() -> None:
    with pytest.raises(ValueError):
        reposition(_positions(), OverrideMap(), "a", dx=1, dy=1, zoom=0)


def test_merge_positions_prefers_overrides() -> None:
    overrides = OverrideMap()
    overrides.set("a", Point(5.0, 6.0))
    merged = merge_positions(_positions(), overrides)

    assert (merged["a"].x, merged["a"].y) == (5.0, 6.0)
    assert merged["root"] == _positions()["root"]
    assert "a" in overrides
    overrides.clear()
    assert merge_positions(_positions(), overrides) == _positions()


def test_params_spacing_flows_into_chart() -> None:
    params = LayoutParams(node_width=100, node_height=40, vertical_spacing=60, horizontal_spacing=20)
    chart = build_chart(_analysis(Contact(id="a"), Contact(id="b", manager_id="a")), params=params)
    assert chart.positions["b"].y == 200.0
    assert chart.params is params
