from __future__ import annotations

import pytest

from app.api.v1.schemas import SourceDocument
from app.core.errors import DocumentInputError
from app.services.documents.combine import combine_documents

MB = 1024 * 1024


def test_combine_documents_labels_each_source() -> None:
    combined = combine_documents(
        [SourceDocument(name="org.txt", text="Dana is CEO."), SourceDocument(name="notes.md", text="Lee reports to Dana.")],
        max_bytes=MB,
    )
    assert combined == (
        "SOURCE FILE: org.txt\n---\nDana is CEO.\n---\n\n"
        "SOURCE FILE: notes.md\n---\nLee reports to Dana.\n---"
    )


def test_combine_documents_requires_at_least_one_document() -> None:
    with pytest.raises(DocumentInputError, match="No source documents"):
        combine_documents([], max_bytes=MB)


def test_combine_documents_rejects_blank_document() -> None:
    with pytest.raises(DocumentInputError, match="File empty.txt is empty."):
        combine_documents([SourceDocument(name="empty.txt", text="  \n ")], max_bytes=MB)


def test_combine_documents_rejects_oversized_document() -> None:
    with pytest.raises(DocumentInputError, match=r"big.txt is too large \(>1MB\)"):
        combine_documents([SourceDocument(name="big.txt", text="x" * (MB + 1))], max_bytes=MB)
