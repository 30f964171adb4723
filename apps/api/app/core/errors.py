from __future__ import annotations


class AccountMapperError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "account_mapper_error"


class DocumentInputError(AccountMapperError):
    """Source documents are empty, unreadable or too large."""

    code = "document_input_error"


class ExtractionError(AccountMapperError):
    """The extraction collaborator failed or returned an unusable payload."""

    code = "extraction_error"


class NoStakeholdersError(ExtractionError):
    code = "no_stakeholders"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No stakeholders identified. Try a document with more explicit organizational data."
        )


class HierarchyCycleError(AccountMapperError):
    """Manager references form a cycle and the configured policy is to reject it."""

    code = "hierarchy_cycle"

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(f"Manager references form a cycle: {' -> '.join(self.cycle)}")


class StructuralError(AccountMapperError):
    """The sanitized contacts did not form a single tree under the synthetic root.

    Sanitization guarantees this cannot happen, so raising it means the
    sanitizer itself is broken rather than the input being bad.
    """

    code = "structural_error"
