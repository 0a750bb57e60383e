from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    views: Path
    figures: Path
    exports: Path
    tables: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    paths = OutputPaths(
        root=out_dir,
        views=out_dir / "views",
        figures=out_dir / "figures",
        exports=out_dir / "exports",
        tables=out_dir / "tables",
    )
    for path in (
        paths.root,
        paths.views,
        paths.figures,
        paths.exports,
        paths.tables,
    ):
        path.mkdir(parents=True, exist_ok=True)
    return paths
