from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PromptDefinition:
    key: str
    description: str
    used_by: str
    template: str


_PROMPTS: dict[str, PromptDefinition] = {
    "account_hierarchy_system": PromptDefinition(
        key="account_hierarchy_system",
        description=(
            "System instructions for stakeholder extraction. "
            "Defines the reporting-line inference rules and forces strict JSON output "
            "matching the account analysis shape."
        ),
        used_by="app/services/extraction/client.py::_extract_via_openai",
        template=(
            "You build high-fidelity organizational hierarchies and stakeholder analyses for account planning. "
            "Return strict JSON with keys: accountName, executiveSummary, criticalAlignmentGaps, strategicWins, "
            "contacts, departmentSummaries.\n"
            "Each contact has keys: id, name, title, managerId, department, roleDescription, buyingRole, "
            "strategicAction, powerLevel, stance, alignmentRisk, seniorityRank.\n"
            "- buyingRole: one of Decision Maker, Technical Influencer, Internal Advocate, User, Unknown.\n"
            "- powerLevel and alignmentRisk: High, Medium or Low.\n"
            "- stance: Supportive, Neutral, Resistant or Unknown.\n"
            "- seniorityRank: 1-10. 1=CEO/President, 2=SVP/EVP, 3=VP, 4=Director, 5=Manager, 6=Individual contributor.\n"
            "- managerId: id of the contact's manager, or null when unknown.\n\n"
            "Hierarchy rules:\n"
            "1. Title parity: VP, Vice President and SVP titles are senior leadership and do not report to "
            "Directors or Managers.\n"
            "2. Inference: when reporting lines are not explicit, use seniorityRank; lower ranks report to "
            "higher ranks within the same department.\n"
            "3. Duplicates: when the same person appears in several documents, merge them into one contact."
        ),
    ),
    "account_hierarchy_user": PromptDefinition(
        key="account_hierarchy_user",
        description=(
            "User prompt carrying the combined source documents for a single account analysis."
        ),
        used_by="app/services/extraction/client.py::_extract_via_openai",
        template=(
            "Build the organizational hierarchy and stakeholder analysis from these documents.\n\n"
            "INPUT DATA:\n"
            '"""\n'
            "{document_text}\n"
            '"""'
        ),
    ),
}


def get_prompt_definitions() -> list[PromptDefinition]:
    return list(_PROMPTS.values())


def render_prompt(key: str, **variables: str) -> str:
    prompt = _PROMPTS.get(key)
    if prompt is None:
        raise KeyError(f"Unknown prompt key: {key}")

    try:
        return prompt.template.format(**variables)
    except KeyError as exc:
        missing_key = str(exc).strip("'")
        raise ValueError(f"Missing variable '{missing_key}' for prompt '{key}'") from exc
