from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Literal

from app.api.v1.schemas import Contact
from app.core.errors import HierarchyCycleError

logger = logging.getLogger(__name__)

CyclePolicy = Literal["break", "raise"]


def resolve_parent(contact: Contact, valid_ids: set[str], root_id: str) -> str:
    manager_id = contact.manager_id
    if not manager_id:
        return root_id
    if manager_id == contact.id:
        return root_id
    if manager_id not in valid_ids:
        return root_id
    return manager_id


def resolve_parents(contacts: Iterable[Contact], valid_ids: set[str], root_id: str) -> dict[str, str]:
    """Map every contact id to a parent that is either a known contact or the root.

    Never raises: missing, self-referencing and dangling manager ids all
    attach the contact to the root.
    """
    return {contact.id: resolve_parent(contact, valid_ids, root_id) for contact in contacts}


def break_cycles(
    parents: Mapping[str, str],
    root_id: str,
    *,
    policy: CyclePolicy = "break",
) -> dict[str, str]:
    """Return a copy of ``parents`` in which every chain ends at ``root_id``.

    Each contact's parent chain is walked with a visited set. When a walk
    comes back to a contact it already passed, that contact is the first
    cycle member reached and is re-attached to the root. With policy
    ``"raise"`` a HierarchyCycleError is raised instead.
    """
    resolved = dict(parents)
    settled: set[str] = set()

    for start in resolved:
        path: list[str] = []
        on_path: set[str] = set()
        current = start
        while current != root_id and current not in settled:
            if current in on_path:
                cycle = path[path.index(current):] + [current]
                if policy == "raise":
                    raise HierarchyCycleError(cycle)
                logger.warning(
                    "hierarchy_cycle_broken",
                    extra={"contact_id": current, "cycle": cycle},
                )
                resolved[current] = root_id
                break
            path.append(current)
            on_path.add(current)
            current = resolved.get(current, root_id)
        settled.update(path)

    return resolved
