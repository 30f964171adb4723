from __future__ import annotations

import logging

from app.core.errors import ExtractionError
from app.db.pg.session import SessionLocal
from app.services.analyses.store import complete_request, fail_request
from app.services.extraction.client import extract_account_analysis
from app.services.extraction.mapper import normalize_analysis_payload

logger = logging.getLogger(__name__)


def process_analysis(analysis_id: str, request_seq: int, document_text: str) -> None:
    """Extract an account analysis and store it if this request is still current.

    A failure marks the record failed and keeps whatever analysis it held.
    """
    db = SessionLocal()
    try:
        try:
            payload = extract_account_analysis(document_text)
            analysis = normalize_analysis_payload(payload)
        except ExtractionError as exc:
            logger.warning(
                "analysis_extraction_failed",
                extra={"analysis_id": analysis_id, "request_seq": request_seq, "error_code": exc.code},
            )
            fail_request(db, analysis_id, request_seq, str(exc))
            return

        if complete_request(db, analysis_id, request_seq, analysis):
            logger.info(
                "analysis_ready",
                extra={
                    "analysis_id": analysis_id,
                    "request_seq": request_seq,
                    "contact_count": len(analysis.contacts),
                },
            )
    finally:
        db.close()
