from __future__ import annotations

import random
from collections import defaultdict

import pytest

from app.api.v1.schemas import AccountAnalysis, Contact
from app.core.config import Settings
from app.services.hierarchy import LayoutParams, build_chart, build_tree, layout_tree, make_root

PARAMS = LayoutParams(node_width=260, node_height=120, vertical_spacing=200, horizontal_spacing=60)
SLOT = 320.0
LEVEL = 320.0


def _tree(edges: list[tuple[str, str | None]], ranks: dict[str, int] | None = None):
    ranks = ranks or {}
    contacts = [Contact(id=child, manager_id=parent, seniority_rank=ranks.get(child, 5)) for child, parent in edges]
    root = make_root("Acme", {contact.id for contact in contacts})
    parents = {contact.id: contact.manager_id or root.id for contact in contacts}
    return build_tree(contacts, parents, root)


def _random_tree(seed: int, size: int):
    rng = random.Random(seed)
    edges: list[tuple[str, str | None]] = []
    for index in range(size):
        parent = rng.choice([None] + [f"n{prior}" for prior in range(index)]) if index else None
        edges.append((f"n{index}", parent))
    return _tree(edges)


def test_manager_centered_over_reports() -> None:
    tree = _tree([("a", None), ("b", "a"), ("c", "a")], ranks={"a": 1, "b": 3, "c": 2})
    positions = layout_tree(tree, PARAMS)

    assert positions[tree.root_id].x == 0.0
    assert positions[tree.root_id].y == 0.0
    assert positions["a"].x == 0.0
    assert positions["a"].y == LEVEL
    assert positions["c"].x == -SLOT / 2
    assert positions["b"].x == SLOT / 2
    assert positions["b"].y == 2 * LEVEL
    assert positions["b"].parent_id == "a"
    assert positions["b"].depth == 2


def test_single_chain_stays_in_one_column() -> None:
    tree = _tree([("a", None), ("b", "a"), ("c", "b"), ("d", "c")])
    positions = layout_tree(tree, PARAMS)

    assert {node.x for node in positions.values()} == {0.0}
    assert positions["d"].y == 4 * LEVEL


def test_leaves_take_exactly_one_slot() -> None:
    tree = _tree([(f"leaf{index}", None) for index in range(4)])
    positions = layout_tree(tree, PARAMS)

    xs = [positions[f"leaf{index}"].x for index in range(4)]
    assert xs == [-1.5 * SLOT, -0.5 * SLOT, 0.5 * SLOT, 1.5 * SLOT]


def test_wide_subtree_pushes_its_sibling_away() -> None:
    edges = [("left", None), ("right", None)]
    edges += [(f"l{index}", "left") for index in range(3)]
    edges += [(f"r{index}", "right") for index in range(3)]
    positions = layout_tree(_tree(edges), PARAMS)

    assert positions["r0"].x - positions["l2"].x == SLOT
    assert positions["right"].x - positions["left"].x == 3 * SLOT


@pytest.mark.parametrize("seed", range(30))
def test_nodes_on_the_same_depth_never_overlap(seed: int) -> None:
    positions = layout_tree(_random_tree(seed, size=40), PARAMS)

    by_depth: dict[int, list[float]] = defaultdict(list)
    for node in positions.values():
        by_depth[node.depth].append(node.x)
        assert node.y == node.depth * LEVEL

    for xs in by_depth.values():
        xs.sort()
        for left, right in zip(xs, xs[1:]):
            assert right - left >= PARAMS.node_width + PARAMS.horizontal_spacing - 1e-9


def test_layout_is_deterministic() -> None:
    tree = _random_tree(7, size=60)
    assert layout_tree(tree, PARAMS) == layout_tree(tree, PARAMS)


def test_rebuilding_the_same_analysis_gives_the_same_coordinates() -> None:
    analysis = AccountAnalysis(
        account_name="Acme",
        contacts=[
            Contact(id="ceo", seniority_rank=1),
            Contact(id="cfo", manager_id="ceo", seniority_rank=2),
            Contact(id="cto", manager_id="ceo", seniority_rank=2),
            Contact(id="dir", manager_id="cto", seniority_rank=4),
        ],
    )
    first = build_chart(analysis, params=PARAMS)
    second = build_chart(analysis, params=PARAMS)

    assert first.root_id != second.root_id
    for contact_id in ("ceo", "cfo", "cto", "dir"):
        a, b = first.positions[contact_id], second.positions[contact_id]
        assert (a.x, a.y, a.depth) == (b.x, b.y, b.depth)


def test_deep_chain_does_not_hit_recursion_limit() -> None:
    edges = [("n0", None)] + [(f"n{index}", f"n{index - 1}") for index in range(1, 1500)]
    positions = layout_tree(_tree(edges), PARAMS)
    assert positions["n1499"].depth == 1500


def test_params_from_settings_use_layout_fields() -> None:
    settings = Settings(layout_node_width=100, layout_node_height=50, layout_vertical_spacing=10, layout_horizontal_spacing=20)
    params = LayoutParams.from_settings(settings)
    assert params.slot_width == 120
    assert params.level_height == 60
