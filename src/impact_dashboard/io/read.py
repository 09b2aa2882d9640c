from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml

from impact_dashboard.features.iam_bindings import entry_from_snapshot, graph_data_from_entries
from impact_dashboard.models import ProjectGraphData, parse_project_graph_data


def _load_payload(path: Path) -> Any:
    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as handle:
        if suffix == ".json":
            return json.load(handle)
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(handle)
    raise ValueError(f"Unsupported graph data file type: {path.suffix}")


def _reject_duplicate_projects(graph_data: Sequence[ProjectGraphData]) -> None:
    seen: set[str] = set()
    for data in graph_data:
        if data.project_id in seen:
            raise ValueError(f"project '{data.project_id}' appears more than once")
        seen.add(data.project_id)


def load_graph_data(path: Path) -> list[ProjectGraphData]:
    """Load project graph data payloads (a list, or one object) from JSON or YAML."""
    payload = _load_payload(path)
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError("graph data file must contain a list of project payloads")
    graph_data = [parse_project_graph_data(item) for item in payload]
    _reject_duplicate_projects(graph_data)
    return graph_data


def load_policy_snapshots(path: Path) -> list[ProjectGraphData]:
    """Count IAM bindings from policy snapshots and group them per project.

    The file holds ``rolePermissions`` (role -> permission list) and
    ``snapshots``, each with ``projectId``, ``timestamp`` and policy ``bindings``.
    """
    payload = _load_payload(path)
    if not isinstance(payload, dict):
        raise ValueError("policy snapshot file must contain a mapping/object")
    role_permissions = payload.get("rolePermissions") or {}
    if not isinstance(role_permissions, dict):
        raise ValueError("payload field 'rolePermissions' must be a mapping/object")
    snapshots = payload.get("snapshots") or []
    if not isinstance(snapshots, list):
        raise ValueError("payload field 'snapshots' must be a list")
    entries = [entry_from_snapshot(snapshot, role_permissions) for snapshot in snapshots]
    return graph_data_from_entries(entries)
