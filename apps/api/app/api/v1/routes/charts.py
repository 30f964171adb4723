from __future__ import annotations

from collections.abc import Mapping

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.deps import get_db, get_settings_dep, get_views
from app.api.v1.routes.analyses import require_analysis_record
from app.api.v1.schemas import (
    ChartBoxOut,
    ChartConnectorOut,
    ChartNodeOut,
    ChartResponse,
    RepositionRequest,
    RepositionResponse,
)
from app.services.analyses.store import load_analysis
from app.services.hierarchy import LayoutParams, PositionedNode, build_chart, connectors_for, project_chart
from app.services.hierarchy.projection import Box, Connector

router = APIRouter(prefix="/analyses", tags=["charts"])


def _node_out(node: PositionedNode, root_id: str, manual_ids: frozenset[str] | set[str]) -> ChartNodeOut:
    return ChartNodeOut(
        id=node.id,
        x=node.x,
        y=node.y,
        parent_id=node.parent_id,
        depth=node.depth,
        is_root=node.id == root_id,
        manually_positioned=node.id in manual_ids,
    )


def _box_out(box: Box) -> ChartBoxOut:
    contact = box.contact
    return ChartBoxOut(
        id=box.id,
        x=box.x,
        y=box.y,
        width=box.width,
        height=box.height,
        name=contact.name,
        title=contact.title,
        department=contact.department,
        buying_role=contact.buying_role,
        stance=contact.stance,
        power_level=contact.power_level,
        seniority_rank=contact.seniority_rank,
    )


def _connector_out(connector: Connector) -> ChartConnectorOut:
    return ChartConnectorOut(source_id=connector.source_id, target_id=connector.target_id, path=connector.path)


def _nodes_out(positions: Mapping[str, PositionedNode], root_id: str, manual_ids: frozenset[str]) -> list[ChartNodeOut]:
    return [_node_out(node, root_id, manual_ids) for node in positions.values()]


@router.get("/{analysis_id}/chart", response_model=ChartResponse)
def get_chart(
    analysis_id: str,
    department: str | None = None,
    db: Session = Depends(get_db),
    settings=Depends(get_settings_dep),
    views=Depends(get_views),
) -> ChartResponse:
    record = require_analysis_record(db, analysis_id)
    analysis = load_analysis(record)
    if analysis is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Analysis has no stakeholders yet (status={record.status})",
        )

    department = department or None
    snapshot = views.snapshot(
        analysis_id,
        record.revision,
        department,
        lambda: build_chart(
            analysis,
            department,
            params=LayoutParams.from_settings(settings),
            cycle_policy=settings.hierarchy_cycle_policy,
            default_department=settings.default_department,
        ),
    )
    chart = snapshot.chart
    projection = project_chart(chart, snapshot.positions)
    return ChartResponse(
        analysis_id=analysis_id,
        build_id=chart.build_id,
        revision=snapshot.revision,
        department=chart.department,
        state=snapshot.state,
        root_id=chart.root_id,
        nodes=_nodes_out(snapshot.positions, chart.root_id, snapshot.manual_ids),
        boxes=[_box_out(box) for box in projection.boxes],
        connectors=[_connector_out(connector) for connector in projection.connectors],
    )


@router.post("/{analysis_id}/chart/reposition", response_model=RepositionResponse)
def reposition_node(
    analysis_id: str,
    payload: RepositionRequest,
    views=Depends(get_views),
) -> RepositionResponse:
    outcome = views.reposition(
        analysis_id,
        payload.build_id,
        payload.contact_id,
        payload.dx,
        payload.dy,
        payload.zoom,
    )
    if not outcome.applied or outcome.node is None or outcome.chart is None or outcome.positions is None:
        return RepositionResponse(applied=False, state=outcome.state)

    return RepositionResponse(
        applied=True,
        state=outcome.state,
        node=_node_out(outcome.node, outcome.chart.root_id, {outcome.node.id}),
        connectors=[
            _connector_out(connector)
            for connector in connectors_for(outcome.chart, outcome.positions, outcome.node.id)
        ],
    )
