from __future__ import annotations

import logging
from collections.abc import Iterable

from app.api.v1.schemas import Contact

logger = logging.getLogger(__name__)


def dedupe_contacts(contacts: Iterable[Contact]) -> tuple[list[Contact], set[str]]:
    """Drop repeated contact ids, keeping the first occurrence in input order.

    Duplicates are extraction noise (the same person re-extracted from a second
    document), so they are dropped rather than reported.
    """
    kept: list[Contact] = []
    valid_ids: set[str] = set()
    dropped = 0
    for contact in contacts:
        if contact.id in valid_ids:
            dropped += 1
            continue
        valid_ids.add(contact.id)
        kept.append(contact)

    if dropped:
        logger.debug("duplicate_contacts_dropped", extra={"dropped_count": dropped, "kept_count": len(kept)})
    return kept, valid_ids
