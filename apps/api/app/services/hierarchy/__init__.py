from __future__ import annotations

from app.services.hierarchy.identity import dedupe_contacts
from app.services.hierarchy.layout import LayoutParams, PositionedNode, layout_tree
from app.services.hierarchy.mutations import (
    OverrideMap,
    Point,
    delete_contact,
    direct_reports,
    merge_positions,
    reposition,
)
from app.services.hierarchy.pipeline import Chart, build_chart, filter_contacts, list_departments
from app.services.hierarchy.projection import Projection, connector_path, connectors_for, project_chart
from app.services.hierarchy.references import break_cycles, resolve_parent, resolve_parents
from app.services.hierarchy.tree import ContactTree, TreeNode, build_tree, is_root_id, make_root

__all__ = [
    "dedupe_contacts",
    "resolve_parent",
    "resolve_parents",
    "break_cycles",
    "make_root",
    "is_root_id",
    "build_tree",
    "ContactTree",
    "TreeNode",
    "LayoutParams",
    "PositionedNode",
    "layout_tree",
    "delete_contact",
    "direct_reports",
    "OverrideMap",
    "Point",
    "reposition",
    "merge_positions",
    "Chart",
    "build_chart",
    "filter_contacts",
    "list_departments",
    "Projection",
    "project_chart",
    "connector_path",
    "connectors_for",
]
