from __future__ import annotations

import json
import sys
from pathlib import Path

from app.db.pg.base import Base
from app.db.pg.session import SessionLocal, engine
from app.services.analyses.store import create_ready_analysis
from app.services.extraction.mapper import normalize_analysis_payload


def main() -> None:
    if len(sys.argv) != 2:
        print("usage: import_analysis.py <analysis.json>")
        raise SystemExit(2)

    analysis = normalize_analysis_payload(json.loads(Path(sys.argv[1]).read_text(encoding="utf-8")))
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        record = create_ready_analysis(db, analysis)
        print(f"Imported {len(analysis.contacts)} contacts as analysis {record.analysis_id}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
