from __future__ import annotations

from collections.abc import Sequence

from app.api.v1.schemas import SourceDocument
from app.core.errors import DocumentInputError


def _document_block(document: SourceDocument) -> str:
    return f"SOURCE FILE: {document.name}\n---\n{document.text}\n---"


def combine_documents(documents: Sequence[SourceDocument], *, max_bytes: int) -> str:
    """Validate source documents and merge them into one extraction input.

    Raises DocumentInputError before anything else runs when there are no
    documents, a document is blank, or a document exceeds ``max_bytes``.
    """
    if not documents:
        raise DocumentInputError("No source documents provided.")

    blocks: list[str] = []
    for document in documents:
        name = document.name.strip() or "untitled"
        if len(document.text.encode("utf-8")) > max_bytes:
            raise DocumentInputError(f"{name} is too large (>{max_bytes // (1024 * 1024)}MB).")
        if not document.text.strip():
            raise DocumentInputError(f"File {name} is empty.")
        blocks.append(_document_block(SourceDocument(name=name, text=document.text)))
    return "\n\n".join(blocks)
