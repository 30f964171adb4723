from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.api.v1.schemas import AccountAnalysis, AnalysisRecordOut
from app.db.pg.models import AnalysisRecord

logger = logging.getLogger(__name__)


def get_analysis_record(db: Session, analysis_id: str) -> AnalysisRecord | None:
    return db.get(AnalysisRecord, analysis_id)


def load_analysis(record: AnalysisRecord) -> AccountAnalysis | None:
    if record.analysis_json is None:
        return None
    return AccountAnalysis.model_validate(record.analysis_json)


def _write_analysis(record: AnalysisRecord, analysis: AccountAnalysis) -> None:
    record.analysis_json = analysis.model_dump(mode="json", by_alias=True)
    record.account_name = analysis.account_name[:255]
    record.revision += 1


def record_out(record: AnalysisRecord) -> AnalysisRecordOut:
    return AnalysisRecordOut(
        analysis_id=record.analysis_id,
        status=record.status,
        error=record.error,
        revision=record.revision,
        request_seq=record.request_seq,
        created_at=record.created_at,
        updated_at=record.updated_at,
        analysis=load_analysis(record),
    )


def create_pending_analysis(db: Session, source_names: Sequence[str]) -> tuple[AnalysisRecord, int]:
    record = AnalysisRecord(status="building", request_seq=1, revision=0, source_names_json=list(source_names))
    db.add(record)
    db.commit()
    db.refresh(record)
    return record, record.request_seq


def create_ready_analysis(db: Session, analysis: AccountAnalysis) -> AnalysisRecord:
    record = AnalysisRecord(status="ready", request_seq=0, revision=0, source_names_json=[])
    _write_analysis(record, analysis)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def begin_request(db: Session, record: AnalysisRecord, source_names: Sequence[str]) -> int:
    """Start a new extraction request, superseding any still in flight."""
    record.request_seq += 1
    record.status = "building"
    record.error = None
    record.source_names_json = list(source_names)
    db.commit()
    db.refresh(record)
    return record.request_seq


def complete_request(db: Session, analysis_id: str, request_seq: int, analysis: AccountAnalysis) -> bool:
    """Replace the stored analysis with an extraction result.

    Returns False, storing nothing, when the record is gone or a newer
    request has been started since ``request_seq`` was issued.
    """
    record = db.get(AnalysisRecord, analysis_id)
    if record is None or record.request_seq != request_seq:
        logger.info(
            "stale_extraction_result_discarded",
            extra={"analysis_id": analysis_id, "request_seq": request_seq},
        )
        return False
    _write_analysis(record, analysis)
    record.status = "ready"
    record.error = None
    db.commit()
    return True


def fail_request(db: Session, analysis_id: str, request_seq: int, message: str) -> bool:
    """Mark the current request as failed. Any previous analysis stays in place."""
    record = db.get(AnalysisRecord, analysis_id)
    if record is None or record.request_seq != request_seq:
        logger.info(
            "stale_extraction_failure_discarded",
            extra={"analysis_id": analysis_id, "request_seq": request_seq},
        )
        return False
    record.status = "failed"
    record.error = message
    db.commit()
    return True


def save_contacts_mutation(db: Session, record: AnalysisRecord, analysis: AccountAnalysis) -> None:
    _write_analysis(record, analysis)
    db.commit()
    db.refresh(record)
