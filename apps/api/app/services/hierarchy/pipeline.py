from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from app.api.v1.schemas import AccountAnalysis, Contact
from app.services.hierarchy.identity import dedupe_contacts
from app.services.hierarchy.layout import LayoutParams, PositionedNode, layout_tree
from app.services.hierarchy.references import CyclePolicy, break_cycles, resolve_parents
from app.services.hierarchy.tree import ContactTree, build_tree, make_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Chart:
    build_id: str
    department: str | None
    tree: ContactTree
    positions: Mapping[str, PositionedNode]
    params: LayoutParams

    @property
    def root_id(self) -> str:
        return self.tree.root_id

    def has_contact(self, node_id: str) -> bool:
        return node_id in self.tree and node_id != self.root_id


def filter_contacts(
    contacts: Sequence[Contact],
    department: str | None,
    default_department: str = "General",
) -> list[Contact]:
    if not department:
        return list(contacts)
    return [contact for contact in contacts if (contact.department or default_department) == department]


def build_chart(
    analysis: AccountAnalysis,
    department: str | None = None,
    *,
    params: LayoutParams | None = None,
    cycle_policy: CyclePolicy = "break",
    default_department: str = "General",
) -> Chart:
    """Run the full reconciliation and layout pipeline over ``analysis``.

    Filtering happens before sanitization, so a manager in another department
    becomes a dangling reference and its reports attach to the root. The
    analysis itself is never modified.
    """
    params = params or LayoutParams()
    working = filter_contacts(analysis.contacts, department, default_department)
    contacts, valid_ids = dedupe_contacts(working)
    root = make_root(analysis.account_name, valid_ids)
    parents = resolve_parents(contacts, valid_ids, root.id)
    parents = break_cycles(parents, root.id, policy=cycle_policy)
    tree = build_tree(contacts, parents, root)
    positions = layout_tree(tree, params)

    build_id = uuid.uuid4().hex
    logger.info(
        "chart_built",
        extra={
            "build_id": build_id,
            "department": department,
            "contact_count": len(contacts),
            "dropped_count": len(working) - len(contacts),
        },
    )
    return Chart(build_id=build_id, department=department, tree=tree, positions=positions, params=params)


def list_departments(analysis: AccountAnalysis, default_department: str = "General") -> list[tuple[str, int]]:
    counts = Counter(contact.department or default_department for contact in analysis.contacts)
    return sorted(counts.items())
