from __future__ import annotations

import json
from datetime import datetime

from impact_dashboard.config import ChartConfig
from impact_dashboard.models import ProjectGraphData, Recommendation, RecommenderType
from impact_dashboard.preprocess.time import to_millis
from impact_dashboard.report.render import build_graph_properties, init_properties, json_safe

DAY_1 = to_millis(datetime(2020, 7, 1))
DAY_2 = to_millis(datetime(2020, 7, 2))


def _graph_data() -> list[ProjectGraphData]:
    return [
        ProjectGraphData(
            "prj-1",
            {DAY_1: 100, DAY_2: 120},
            {DAY_2: Recommendation("prj-1", "Rec-1", RecommenderType.IAM_BINDING, DAY_2)},
        ),
        ProjectGraphData("prj-2", {DAY_2: 40}),
    ]


def test_build_graph_properties_combines_table_and_options() -> None:
    properties = build_graph_properties(_graph_data())

    assert len(properties.rows) == 2
    assert properties.columns[0] == "Time"
    assert properties.columns[4] == "prj-2"
    assert properties.options["series"] == {0: {"color": "#3c78d8"}, 1: {"color": "#cc0000"}}
    assert properties.rows[1][2] == "Rec-1"


def test_build_graph_properties_is_idempotent() -> None:
    graph_data = _graph_data()

    assert build_graph_properties(graph_data) == build_graph_properties(graph_data)


def test_build_graph_properties_positional_alignment_from_config() -> None:
    properties = build_graph_properties(_graph_data(), chart=ChartConfig(alignment="positional"))

    assert len(properties.rows[0]) == 4
    assert len(properties.rows[1]) == 7


def test_payload_is_json_serializable() -> None:
    payload = build_graph_properties(_graph_data()).to_payload()

    decoded = json.loads(json.dumps(payload))
    assert decoded["rows"][0][0] == datetime(2020, 7, 1).isoformat()
    assert decoded["options"]["series"]["1"] == {"color": "#cc0000"}
    assert decoded["rows"][0][4:] == [None, None, None]


def test_init_properties_is_empty_chart() -> None:
    properties = init_properties()

    assert properties.rows == []
    assert properties.columns == []
    assert properties.options["series"] == {}


def test_json_safe_drops_non_finite_floats() -> None:
    assert json_safe({"a": float("nan"), "b": [1.5, float("inf")]}) == {"a": None, "b": [1.5, None]}
