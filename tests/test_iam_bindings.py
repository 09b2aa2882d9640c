from __future__ import annotations

import pytest

from impact_dashboard.features.iam_bindings import (
    IamBindingEntry,
    count_iam_bindings,
    daily_counts_from_entries,
    entry_from_snapshot,
    graph_data_from_entries,
    members_for_roles,
)


def test_members_for_roles_counts_members_per_role() -> None:
    bindings = [
        {"role": "roles/owner", "members": ["user:a@example.com"]},
        {"role": "roles/viewer", "members": ["user:a@example.com", "group:g@example.com"]},
    ]

    assert members_for_roles(bindings) == {"roles/owner": 1, "roles/viewer": 2}


def test_members_for_roles_requires_role() -> None:
    with pytest.raises(ValueError, match="role"):
        members_for_roles([{"members": []}])


def test_count_iam_bindings_weights_members_by_permissions() -> None:
    members = {"roles/owner": 1, "roles/viewer": 2, "roles/custom": 4}
    role_permissions = {
        "roles/owner": ["a", "b", "c"],
        "roles/viewer": ["a"],
        "roles/editor": ["a", "b"],
    }

    assert count_iam_bindings(members, role_permissions) == 3 * 1 + 1 * 2


def test_daily_counts_from_entries_orders_and_filters_by_project() -> None:
    entries = [
        IamBindingEntry("prj-1", "Project 1", "1", 3000, 30),
        IamBindingEntry("prj-2", "Project 2", "2", 2000, 99),
        IamBindingEntry("prj-1", "Project 1", "1", 1000, 10),
    ]

    counts = daily_counts_from_entries(entries, project_id="prj-1")

    assert list(counts.items()) == [(1000, 10), (3000, 30)]


def test_entry_from_snapshot_counts_policy_bindings() -> None:
    entry = entry_from_snapshot(
        {
            "projectId": "prj-1",
            "projectName": "Project 1",
            "projectNumber": 11,
            "timestamp": 5000,
            "bindings": [{"role": "roles/owner", "members": ["user:a", "user:b"]}],
        },
        {"roles/owner": ["a", "b", "c"]},
    )

    assert entry == IamBindingEntry("prj-1", "Project 1", "11", 5000, 6)


def test_entry_from_snapshot_requires_integer_timestamp() -> None:
    with pytest.raises(ValueError, match="timestamp"):
        entry_from_snapshot({"projectId": "prj-1", "timestamp": "soon"}, {})


def test_graph_data_from_entries_keeps_first_seen_project_order() -> None:
    entries = [
        IamBindingEntry("prj-2", "Project 2", "2", 2000, 20),
        IamBindingEntry("prj-1", "Project 1", "1", 1000, 10),
        IamBindingEntry("prj-2", "Project 2", "2", 1000, 15),
    ]

    graph_data = graph_data_from_entries(entries)

    assert [data.project_id for data in graph_data] == ["prj-2", "prj-1"]
    assert list(graph_data[0].daily_counts.items()) == [(1000, 15), (2000, 20)]
    assert graph_data[0].daily_recommendations == {}
