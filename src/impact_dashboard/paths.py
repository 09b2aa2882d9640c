from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    tables: Path
    figures: Path
    payloads: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    paths = OutputPaths(
        root=out_dir,
        tables=out_dir / "tables",
        figures=out_dir / "figures",
        payloads=out_dir / "payloads",
    )
    for path in (paths.root, paths.tables, paths.figures, paths.payloads):
        path.mkdir(parents=True, exist_ok=True)
    return paths
