from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.deps import get_db, get_settings_dep, get_views
from app.api.v1.schemas import (
    AnalysisRecordOut,
    AnalyzeRequest,
    DeleteContactResponse,
    DepartmentCount,
    DepartmentsResponse,
)
from app.db.pg.models import AnalysisRecord
from app.services.analyses.store import (
    begin_request,
    create_pending_analysis,
    create_ready_analysis,
    get_analysis_record,
    load_analysis,
    record_out,
    save_contacts_mutation,
)
from app.services.documents.combine import combine_documents
from app.services.extraction.mapper import normalize_analysis_payload
from app.services.hierarchy import delete_contact, direct_reports, list_departments
from app.workers.queue import enqueue_job

router = APIRouter(prefix="/analyses", tags=["analyses"])
logger = logging.getLogger(__name__)


def require_analysis_record(db: Session, analysis_id: str) -> AnalysisRecord:
    record = get_analysis_record(db, analysis_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    return record


@router.post("", response_model=AnalysisRecordOut, status_code=status.HTTP_202_ACCEPTED)
def create_analysis(
    payload: AnalyzeRequest,
    db: Session = Depends(get_db),
    settings=Depends(get_settings_dep),
) -> AnalysisRecordOut:
    document_text = combine_documents(payload.documents, max_bytes=settings.max_document_bytes)
    record, request_seq = create_pending_analysis(db, [document.name for document in payload.documents])
    enqueue_job("process_analysis", record.analysis_id, request_seq, document_text)
    db.refresh(record)
    return record_out(record)


@router.post("/import", response_model=AnalysisRecordOut, status_code=status.HTTP_201_CREATED)
def import_analysis(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
) -> AnalysisRecordOut:
    analysis = normalize_analysis_payload(payload)
    record = create_ready_analysis(db, analysis)
    logger.info(
        "analysis_imported",
        extra={"analysis_id": record.analysis_id, "contact_count": len(analysis.contacts)},
    )
    return record_out(record)


@router.post("/{analysis_id}/reanalyze", response_model=AnalysisRecordOut, status_code=status.HTTP_202_ACCEPTED)
def reanalyze(
    analysis_id: str,
    payload: AnalyzeRequest,
    db: Session = Depends(get_db),
    settings=Depends(get_settings_dep),
) -> AnalysisRecordOut:
    record = require_analysis_record(db, analysis_id)
    document_text = combine_documents(payload.documents, max_bytes=settings.max_document_bytes)
    request_seq = begin_request(db, record, [document.name for document in payload.documents])
    enqueue_job("process_analysis", analysis_id, request_seq, document_text)
    db.refresh(record)
    return record_out(record)


@router.get("/{analysis_id}", response_model=AnalysisRecordOut)
def get_analysis(analysis_id: str, db: Session = Depends(get_db)) -> AnalysisRecordOut:
    return record_out(require_analysis_record(db, analysis_id))


@router.get("/{analysis_id}/departments", response_model=DepartmentsResponse)
def get_departments(
    analysis_id: str,
    db: Session = Depends(get_db),
    settings=Depends(get_settings_dep),
) -> DepartmentsResponse:
    analysis = load_analysis(require_analysis_record(db, analysis_id))
    items = []
    if analysis is not None:
        items = [
            DepartmentCount(name=name, stakeholder_count=count)
            for name, count in list_departments(analysis, settings.default_department)
        ]
    return DepartmentsResponse(analysis_id=analysis_id, items=items)


@router.delete("/{analysis_id}/contacts/{contact_id}", response_model=DeleteContactResponse)
def delete_stakeholder(
    analysis_id: str,
    contact_id: str,
    db: Session = Depends(get_db),
    views=Depends(get_views),
) -> DeleteContactResponse:
    record = require_analysis_record(db, analysis_id)
    analysis = load_analysis(record)
    if analysis is None:
        return DeleteContactResponse(
            analysis_id=analysis_id, contact_id=contact_id, deleted=False, revision=record.revision
        )

    updated = delete_contact(analysis, contact_id)
    if updated is analysis:
        return DeleteContactResponse(
            analysis_id=analysis_id, contact_id=contact_id, deleted=False, revision=record.revision
        )

    reparented = direct_reports(analysis, contact_id)
    save_contacts_mutation(db, record, updated)
    views.invalidate(analysis_id)
    return DeleteContactResponse(
        analysis_id=analysis_id,
        contact_id=contact_id,
        deleted=True,
        revision=record.revision,
        reparented=reparented,
    )
