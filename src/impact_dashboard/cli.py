from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from impact_dashboard.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from impact_dashboard.io.fake import FakeResponses, fake_project_graph_data, fake_projects
from impact_dashboard.io.fetch import list_project_summaries
from impact_dashboard.io.read import load_graph_data, load_policy_snapshots
from impact_dashboard.io.write import write_payload, write_table
from impact_dashboard.logging import configure_logging
from impact_dashboard.models import (
    Project,
    SortBy,
    SortDirection,
    project_graph_data_payload,
    sort_projects,
)
from impact_dashboard.paths import build_output_paths
from impact_dashboard.pipeline.graph_session import GraphSession
from impact_dashboard.report.options import apply_date_range
from impact_dashboard.report.render import GraphProperties, build_graph_properties
from impact_dashboard.report.table import CELLS_PER_PROJECT
from impact_dashboard.viz.graph import plot_iam_bindings

LOGGER = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _configure_logging(log_level: str) -> None:
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


def _load_app_config(config_path: Path, fake: bool | None = None) -> AppConfig:
    cfg = load_config(config_path)
    if fake is not None:
        cfg.fetch.use_fake = fake
    return cfg


def _request_kwargs(cfg: AppConfig) -> dict[str, Any]:
    if cfg.fetch.use_fake:
        return {"use_fake": True, "responses": fake_projects(FakeResponses())}
    if not cfg.fetch.base_url:
        raise typer.BadParameter(
            "Missing fetch.base_url. Set it in config or IMPACT_DASHBOARD_BASE_URL, "
            "or enable fetch.use_fake."
        )
    return {
        "use_fake": False,
        "base_url": cfg.fetch.base_url,
        "timeout": cfg.fetch.timeout_seconds,
    }


def _date_range(
    start: datetime | None, end: datetime | None
) -> tuple[datetime, datetime] | None:
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise typer.BadParameter("Use --start and --end together")
    if start > end:
        raise typer.BadParameter("--start must not be after --end")
    return start, end


def _select_projects(summaries: list[Project], project_ids: list[str]) -> list[Project]:
    if not project_ids:
        return summaries
    by_id = {summary.project_id: summary for summary in summaries}
    missing = [project_id for project_id in project_ids if project_id not in by_id]
    if missing:
        raise typer.BadParameter(f"Unknown project ids: {', '.join(missing)}")
    return [by_id[project_id] for project_id in project_ids]


async def _session_properties(
    cfg: AppConfig,
    project_ids: list[str],
    date_range: tuple[datetime, datetime] | None,
) -> GraphProperties:
    request_kwargs = _request_kwargs(cfg)
    session = GraphSession(cfg, **request_kwargs)
    if date_range is not None:
        session.set_date_range(*date_range)
    summaries = await list_project_summaries(**request_kwargs)
    return await session.apply_selection(_select_projects(summaries, project_ids))


@app.command()
def graph(
    input_path: Path | None = typer.Option(
        None,
        "--input",
        exists=True,
        readable=True,
        resolve_path=True,
        help="JSON/YAML file of project graph data payloads. Fetches when omitted.",
    ),
    policies: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="JSON/YAML file of IAM policy snapshots plus the role permission catalog.",
    ),
    project: list[str] | None = typer.Option(
        None,
        "--project",
        help="Project id to fetch; repeat for several. Defaults to every listed project.",
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    fake: bool | None = typer.Option(None, "--fake/--no-fake", help="Override fetch.use_fake."),
    start: datetime | None = typer.Option(None, help="Start of the visible date range."),
    end: datetime | None = typer.Option(None, help="End of the visible date range."),
    plot: bool | None = typer.Option(None, "--plot/--no-plot", help="Override outputs.plot."),
    log_level: str = typer.Option("INFO", help="Logging level, e.g. DEBUG or WARNING."),
) -> None:
    """Build chart rows, columns and options for the selected projects."""
    _configure_logging(log_level)
    cfg = _load_app_config(config, fake)
    project_ids = list(project or [])
    date_range = _date_range(start, end)
    sources = [source for source in (input_path, policies) if source is not None]
    if len(sources) > 1:
        raise typer.BadParameter("Use either --input or --policies, not both")
    if sources and project_ids:
        raise typer.BadParameter("Use either a data file or --project, not both")

    if sources:
        loader = load_graph_data if input_path is not None else load_policy_snapshots
        properties = build_graph_properties(
            loader(sources[0]),
            chart=cfg.chart,
            timezone=cfg.time.timezone,
        )
        if date_range is not None:
            properties.options = apply_date_range(properties.options, *date_range)
    else:
        properties = asyncio.run(_session_properties(cfg, project_ids, date_range))

    paths = build_output_paths(out)
    payload_path = write_payload(properties.to_payload(), paths.payloads / "graph_properties.json")
    extension = "parquet" if cfg.outputs.tables_format == "parquet" else "csv"
    table_path = write_table(
        properties.to_frame(),
        paths.tables / f"graph_rows.{extension}",
        fmt=cfg.outputs.tables_format,
    )
    LOGGER.info(
        "Wrote %d rows for %d projects",
        len(properties.rows),
        (len(properties.columns) - 1) // CELLS_PER_PROJECT,
    )

    if cfg.outputs.plot if plot is None else plot:
        try:
            plot_iam_bindings(
                properties,
                paths.figures / f"graph.{cfg.outputs.figures_format}",
            )
        except Exception:  # pragma: no cover
            LOGGER.exception("Failed rendering graph preview figure")

    typer.echo(f"Graph complete. Rows: {len(properties.rows)}")
    typer.echo(f"- payload: {payload_path}")
    typer.echo(f"- table: {table_path}")


@app.command()
def projects(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    sort_by: SortBy = typer.Option(SortBy.iam_bindings),
    direction: SortDirection = typer.Option(SortDirection.descending),
    fake: bool | None = typer.Option(None, "--fake/--no-fake", help="Override fetch.use_fake."),
    log_level: str = typer.Option("INFO", help="Logging level, e.g. DEBUG or WARNING."),
) -> None:
    """List project summaries sorted by the chosen field."""
    _configure_logging(log_level)
    cfg = _load_app_config(config, fake)
    summaries = asyncio.run(list_project_summaries(**_request_kwargs(cfg)))
    for summary in sort_projects(summaries, sort_by, direction):
        typer.echo(
            f"- {summary.project_id}: {summary.name}"
            f" number={summary.project_number}"
            f" avg_iam_bindings={summary.metadata.average_iam_bindings_in_past_year:g}"
        )


@app.command("fake-data")
def fake_data(
    out: Path = typer.Option(Path("fake_projects.json"), resolve_path=True),
    log_level: str = typer.Option("INFO", help="Logging level, e.g. DEBUG or WARNING."),
) -> None:
    """Write the canned dev projects as graph data payloads."""
    _configure_logging(log_level)
    payload = [project_graph_data_payload(data) for data in fake_project_graph_data()]
    path = write_payload(payload, out)
    typer.echo(f"Fake data written to: {path}")


if __name__ == "__main__":
    app()
