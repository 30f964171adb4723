from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from pathlib import Path

from app.core.config import get_settings
from app.db.pg.session import SessionLocal
from app.services.analyses.store import get_analysis_record, load_analysis
from app.services.extraction.mapper import normalize_analysis_payload
from app.services.hierarchy import LayoutParams, build_chart, project_chart


def _load(source: str):
    path = Path(source)
    if path.is_file():
        return normalize_analysis_payload(json.loads(path.read_text(encoding="utf-8")))

    db = SessionLocal()
    try:
        record = get_analysis_record(db, source)
        if record is None:
            raise SystemExit(f"No analysis file or record named {source}")
        analysis = load_analysis(record)
        if analysis is None:
            raise SystemExit(f"Analysis {source} has no stakeholders yet (status={record.status})")
        return analysis
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the laid-out chart for an analysis as JSON.")
    parser.add_argument("source", help="Path to an analysis JSON file, or a stored analysis id")
    parser.add_argument("--department", default=None, help="Only chart contacts in this department")
    args = parser.parse_args()

    settings = get_settings()
    chart = build_chart(
        _load(args.source),
        args.department,
        params=LayoutParams.from_settings(settings),
        cycle_policy=settings.hierarchy_cycle_policy,
        default_department=settings.default_department,
    )
    projection = project_chart(chart)
    output = {
        "build_id": chart.build_id,
        "department": chart.department,
        "boxes": [
            {
                "id": box.id,
                "x": box.x,
                "y": box.y,
                "width": box.width,
                "height": box.height,
                "name": box.contact.name,
                "title": box.contact.title,
            }
            for box in projection.boxes
        ],
        "connectors": [asdict(connector) for connector in projection.connectors],
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
