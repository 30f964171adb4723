from __future__ import annotations

import logging
from typing import Any

from app.api.v1.schemas import AccountAnalysis, Contact, DepartmentSummary
from app.core.config import get_settings
from app.core.errors import ExtractionError, NoStakeholdersError

logger = logging.getLogger(__name__)

_BUYING_ROLES: dict[str, str] = {
    "decision_maker": "Decision Maker",
    "decisionmaker": "Decision Maker",
    "economic_buyer": "Decision Maker",
    "technical_influencer": "Technical Influencer",
    "technicalinfluencer": "Technical Influencer",
    "influencer": "Technical Influencer",
    "internal_advocate": "Internal Advocate",
    "internaladvocate": "Internal Advocate",
    "champion": "Internal Advocate",
    "user": "User",
    "end_user": "User",
}

_LEVELS: dict[str, str] = {"high": "High", "medium": "Medium", "med": "Medium", "low": "Low"}

_STANCES: dict[str, str] = {
    "supportive": "Supportive",
    "supporter": "Supportive",
    "neutral": "Neutral",
    "resistant": "Resistant",
    "blocker": "Resistant",
    "detractor": "Resistant",
}

UNRANKED_SENIORITY = 10


def _normalized_text(value: object) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return ""
    return " ".join(value.split()).strip()


def _normalized_token(value: object) -> str:
    return _normalized_text(value).lower().replace("-", "_").replace(" ", "_")


def _first_present(raw: dict[str, Any], *keys: str) -> object:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _as_int(value: object, default: int) -> int:
    try:
        return int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return default


def _as_float(value: object, default: float) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _summary_text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [text for text in (_normalized_text(item) for item in value) if text]


def _seniority_rank(value: object) -> int:
    rank = _as_int(value, UNRANKED_SENIORITY)
    return max(1, min(UNRANKED_SENIORITY, rank))


def _contact_from_raw(raw: dict[str, Any], default_department: str) -> Contact | None:
    contact_id = _normalized_text(raw.get("id"))
    if not contact_id:
        return None

    manager_id = _normalized_text(_first_present(raw, "managerId", "manager_id")) or None
    return Contact(
        id=contact_id,
        name=_normalized_text(raw.get("name")) or "Unnamed stakeholder",
        title=_normalized_text(raw.get("title")) or "Unknown",
        manager_id=manager_id,
        department=_normalized_text(raw.get("department")) or default_department,
        role_description=_normalized_text(_first_present(raw, "roleDescription", "role_description")) or None,
        buying_role=_BUYING_ROLES.get(_normalized_token(_first_present(raw, "buyingRole", "buying_role")), "Unknown"),
        power_level=_LEVELS.get(_normalized_token(_first_present(raw, "powerLevel", "power_level")), "Medium"),
        stance=_STANCES.get(_normalized_token(raw.get("stance")), "Unknown"),
        alignment_risk=_LEVELS.get(_normalized_token(_first_present(raw, "alignmentRisk", "alignment_risk")), "Medium"),
        seniority_rank=_seniority_rank(_first_present(raw, "seniorityRank", "seniority_rank")),
        strategic_action=_normalized_text(_first_present(raw, "strategicAction", "strategic_action")),
    )


def _department_summary_from_raw(raw: object) -> DepartmentSummary | None:
    if not isinstance(raw, dict):
        return None
    name = _normalized_text(raw.get("name"))
    if not name:
        return None
    return DepartmentSummary(
        name=name,
        focus=_normalized_text(raw.get("focus")),
        key_stakeholder_count=max(0, _as_int(_first_present(raw, "keyStakeholderCount", "key_stakeholder_count"), 0)),
        alignment_score=_as_float(_first_present(raw, "alignmentScore", "alignment_score"), 0.0),
    )


def normalize_analysis_payload(payload: object, *, require_contacts: bool = True) -> AccountAnalysis:
    """Turn an untrusted extraction result into an AccountAnalysis.

    Missing departments become the default department. A manager id that is
    blank, points at the contact itself, or names no contact in the payload
    becomes None. Duplicate ids are kept; the hierarchy pipeline handles them.
    Raises NoStakeholdersError when no usable contact remains and
    ``require_contacts`` is set.
    """
    if not isinstance(payload, dict):
        raise ExtractionError("Extraction result is not a JSON object.")

    settings = get_settings()
    raw_contacts = payload.get("contacts")
    contacts: list[Contact] = []
    skipped = 0
    for raw in raw_contacts if isinstance(raw_contacts, list) else []:
        contact = _contact_from_raw(raw, settings.default_department) if isinstance(raw, dict) else None
        if contact is None:
            skipped += 1
            continue
        contacts.append(contact)

    known_ids = {contact.id for contact in contacts}
    contacts = [
        contact
        if contact.manager_id is None or (contact.manager_id in known_ids and contact.manager_id != contact.id)
        else contact.model_copy(update={"manager_id": None})
        for contact in contacts
    ]

    if skipped:
        logger.warning("extraction_contacts_skipped", extra={"skipped_count": skipped})
    if require_contacts and not contacts:
        raise NoStakeholdersError()

    raw_summaries = payload.get("departmentSummaries")
    summaries = [
        summary
        for summary in (_department_summary_from_raw(item) for item in (raw_summaries if isinstance(raw_summaries, list) else []))
        if summary is not None
    ]
    return AccountAnalysis(
        account_name=_normalized_text(payload.get("accountName")),
        executive_summary=_summary_text(payload.get("executiveSummary")),
        critical_alignment_gaps=_string_list(payload.get("criticalAlignmentGaps")),
        strategic_wins=_string_list(payload.get("strategicWins")),
        contacts=contacts,
        department_summaries=summaries,
    )
