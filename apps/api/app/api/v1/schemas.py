from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


BuyingRole = Literal["Decision Maker", "Technical Influencer", "Internal Advocate", "User", "Unknown"]
PowerLevel = Literal["High", "Medium", "Low"]
Stance = Literal["Supportive", "Neutral", "Resistant", "Unknown"]
AlignmentRisk = Literal["High", "Medium", "Low"]
AnalysisStatus = Literal["building", "ready", "failed"]
ViewState = Literal["unbuilt", "built", "dirty"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Contact(CamelModel):
    id: str
    name: str = ""
    title: str = ""
    manager_id: str | None = None
    department: str = "General"
    role_description: str | None = None
    buying_role: BuyingRole = "Unknown"
    power_level: PowerLevel = "Medium"
    stance: Stance = "Unknown"
    alignment_risk: AlignmentRisk = "Medium"
    seniority_rank: int = Field(default=10, ge=0, le=10)
    strategic_action: str = ""


class DepartmentSummary(CamelModel):
    name: str
    focus: str = ""
    key_stakeholder_count: int = 0
    alignment_score: float = 0.0


class AccountAnalysis(CamelModel):
    account_name: str = ""
    executive_summary: str = ""
    critical_alignment_gaps: list[str] = Field(default_factory=list)
    strategic_wins: list[str] = Field(default_factory=list)
    contacts: list[Contact] = Field(default_factory=list)
    department_summaries: list[DepartmentSummary] = Field(default_factory=list)


class SourceDocument(CamelModel):
    name: str
    text: str


class AnalyzeRequest(CamelModel):
    documents: list[SourceDocument] = Field(default_factory=list)


class AnalysisRecordOut(CamelModel):
    analysis_id: str
    status: AnalysisStatus
    error: str | None = None
    revision: int
    request_seq: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    analysis: AccountAnalysis | None = None


class DeleteContactResponse(CamelModel):
    analysis_id: str
    contact_id: str
    deleted: bool
    revision: int
    reparented: list[str] = Field(default_factory=list)


class DepartmentCount(CamelModel):
    name: str
    stakeholder_count: int


class DepartmentsResponse(CamelModel):
    analysis_id: str
    items: list[DepartmentCount]


class ChartNodeOut(CamelModel):
    id: str
    x: float
    y: float
    parent_id: str | None = None
    depth: int
    is_root: bool = False
    manually_positioned: bool = False


class ChartBoxOut(CamelModel):
    id: str
    x: float
    y: float
    width: float
    height: float
    name: str
    title: str
    department: str
    buying_role: BuyingRole
    stance: Stance
    power_level: PowerLevel
    seniority_rank: int


class ChartConnectorOut(CamelModel):
    source_id: str
    target_id: str
    path: str


class ChartResponse(CamelModel):
    analysis_id: str
    build_id: str
    revision: int
    department: str | None = None
    state: ViewState
    root_id: str
    nodes: list[ChartNodeOut]
    boxes: list[ChartBoxOut]
    connectors: list[ChartConnectorOut]


class RepositionRequest(CamelModel):
    build_id: str
    contact_id: str
    dx: float
    dy: float
    zoom: float = Field(default=1.0, gt=0)


class RepositionResponse(CamelModel):
    applied: bool
    state: ViewState
    node: ChartNodeOut | None = None
    connectors: list[ChartConnectorOut] = Field(default_factory=list)
