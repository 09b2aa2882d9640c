from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from impact_dashboard.report.render import GraphProperties
from impact_dashboard.report.table import TIME_COLUMN
from impact_dashboard.viz.common import save_figure


def plot_iam_bindings(properties: GraphProperties, output_path: Path) -> Path:
    """Static preview of the chart: one line per project, markers on recommendation days."""
    frame = properties.to_frame()
    fig, ax = plt.subplots(figsize=(12, 5))
    if not frame.empty:
        times = pd.to_datetime(frame[TIME_COLUMN])
        series_options = properties.options.get("series", {})
        project_ids = [str(column) for column in properties.columns[1::3]]
        for ordinal, project_id in enumerate(project_ids):
            color = series_options.get(ordinal, {}).get("color")
            values = pd.to_numeric(frame[project_id], errors="coerce")
            ax.plot(times, values, linewidth=1.5, color=color, label=project_id)
            marked = frame[f"{project_id}.style"].notna()
            ax.scatter(times[marked], values[marked], s=40, color=color, zorder=3)
    ax.set_title("IAM bindings per day")
    ax.set_xlabel("Day")
    ax.set_ylabel("IAM bindings")
    return save_figure(fig, output_path)
