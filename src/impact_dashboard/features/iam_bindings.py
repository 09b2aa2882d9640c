from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from impact_dashboard.models import ProjectGraphData


@dataclass(frozen=True)
class IamBindingEntry:
    """IAM binding count recorded for a project at one point in time."""

    project_id: str
    project_name: str
    project_number: str
    timestamp: int
    bindings_number: int


def members_for_roles(bindings: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    """Map each policy binding's role to how many members it grants."""
    members: dict[str, int] = {}
    for binding in bindings:
        role = binding.get("role")
        if not isinstance(role, str) or not role:
            raise ValueError("policy binding is missing its role")
        raw_members = binding.get("members", binding.get("member")) or []
        if not isinstance(raw_members, Sequence) or isinstance(raw_members, str):
            raise ValueError(f"members of role '{role}' must be a list")
        members[role] = len(raw_members)
    return members


def count_iam_bindings(
    members: Mapping[str, int],
    role_permissions: Mapping[str, Sequence[str]],
) -> int:
    """Permissions granted per role times the members holding it, summed.

    Roles missing from ``role_permissions`` contribute nothing.
    """
    return sum(
        len(permissions) * members[role]
        for role, permissions in role_permissions.items()
        if role in members
    )


def entry_from_snapshot(
    snapshot: Mapping[str, Any],
    role_permissions: Mapping[str, Sequence[str]],
) -> IamBindingEntry:
    """Count the bindings of one project's policy as captured at ``timestamp``."""
    project_id = snapshot.get("projectId")
    if not isinstance(project_id, str) or not project_id:
        raise ValueError("policy snapshot field 'projectId' must be a non-empty string")
    timestamp = snapshot.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise ValueError(f"policy snapshot of '{project_id}' needs an integer 'timestamp'")
    bindings = snapshot.get("bindings") or []
    if not isinstance(bindings, list):
        raise ValueError(f"bindings of '{project_id}' must be a list")
    return IamBindingEntry(
        project_id=project_id,
        project_name=str(snapshot.get("projectName", project_id)),
        project_number=str(snapshot.get("projectNumber", "")),
        timestamp=timestamp,
        bindings_number=count_iam_bindings(members_for_roles(bindings), role_permissions),
    )


def daily_counts_from_entries(
    entries: Iterable[IamBindingEntry],
    project_id: str | None = None,
) -> dict[int, int]:
    selected = [
        entry for entry in entries if project_id is None or entry.project_id == project_id
    ]
    selected.sort(key=lambda entry: entry.timestamp)
    return {entry.timestamp: entry.bindings_number for entry in selected}


def graph_data_from_entries(entries: Sequence[IamBindingEntry]) -> list[ProjectGraphData]:
    """One ``ProjectGraphData`` per project, in order of first appearance."""
    project_ids = list(dict.fromkeys(entry.project_id for entry in entries))
    return [
        ProjectGraphData(project_id, daily_counts_from_entries(entries, project_id))
        for project_id in project_ids
    ]
