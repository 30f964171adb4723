from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass

from app.api.v1.schemas import Contact
from app.core.errors import StructuralError

ROOT_ID_PREFIX = "__root__:"
ROOT_TITLE = "Account HQ"


@dataclass(frozen=True)
class TreeNode:
    id: str
    contact: Contact
    parent_id: str | None
    depth: int
    children: tuple[str, ...]


@dataclass(frozen=True)
class ContactTree:
    """A rooted tree of contacts keyed by id, stored in pre-order."""

    root_id: str
    nodes: Mapping[str, TreeNode]

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    @property
    def root(self) -> TreeNode:
        return self.nodes[self.root_id]

    def node(self, node_id: str) -> TreeNode:
        return self.nodes[node_id]

    def children_of(self, node_id: str) -> tuple[str, ...]:
        return self.nodes[node_id].children

    def contacts(self) -> list[Contact]:
        return [node.contact for node in self.nodes.values() if node.id != self.root_id]


def is_root_id(node_id: str) -> bool:
    return node_id.startswith(ROOT_ID_PREFIX)


def new_root_id(taken_ids: set[str]) -> str:
    while True:
        candidate = f"{ROOT_ID_PREFIX}{uuid.uuid4().hex}"
        if candidate not in taken_ids:
            return candidate


def make_root(account_name: str, taken_ids: set[str]) -> Contact:
    return Contact(
        id=new_root_id(taken_ids),
        name=account_name or "Account",
        title=ROOT_TITLE,
        manager_id=None,
        department="Core",
        buying_role="Unknown",
        power_level="Low",
        stance="Neutral",
        seniority_rank=0,
        strategic_action="Centralized account oversight",
    )


def _group_children(contacts: Sequence[Contact], parents: Mapping[str, str]) -> dict[str, list[Contact]]:
    grouped: dict[str, list[Contact]] = defaultdict(list)
    for contact in contacts:
        grouped[parents[contact.id]].append(contact)
    for siblings in grouped.values():
        # list.sort is stable, so equal ranks keep input order
        siblings.sort(key=lambda contact: contact.seniority_rank)
    return grouped


def build_tree(contacts: Sequence[Contact], parents: Mapping[str, str], root: Contact) -> ContactTree:
    """Attach sanitized contacts under ``root`` with siblings ordered by seniority.

    ``parents`` must map every contact id to another contact id or to the root
    id. Raises StructuralError when that does not hold or when some contact
    cannot be reached from the root.
    """
    known_ids = {contact.id for contact in contacts}
    missing = [contact.id for contact in contacts if contact.id not in parents]
    if missing:
        raise StructuralError(f"Contacts without a resolved parent: {', '.join(sorted(missing))}")
    unknown_parents = {parents[cid] for cid in known_ids} - known_ids - {root.id}
    if unknown_parents:
        raise StructuralError(f"Resolved parents not in working set: {', '.join(sorted(unknown_parents))}")

    grouped = _group_children(contacts, parents)
    nodes: dict[str, TreeNode] = {}
    stack: list[tuple[Contact, str | None, int]] = [(root, None, 0)]
    while stack:
        contact, parent_id, depth = stack.pop()
        if contact.id in nodes:
            raise StructuralError(f"Contact reached twice while building tree: {contact.id}")
        children = grouped.get(contact.id, [])
        nodes[contact.id] = TreeNode(
            id=contact.id,
            contact=contact,
            parent_id=parent_id,
            depth=depth,
            children=tuple(child.id for child in children),
        )
        for child in reversed(children):
            stack.append((child, contact.id, depth + 1))

    unreachable = known_ids - nodes.keys()
    if unreachable:
        raise StructuralError(
            f"Contacts not connected to the root: {', '.join(sorted(unreachable))}"
        )
    return ContactTree(root_id=root.id, nodes=nodes)
