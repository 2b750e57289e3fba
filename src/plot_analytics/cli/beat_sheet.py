"""CLI for generating a beat sheet and optionally persisting it."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from plot_analytics.adapters.sqlite_plot_store import SQLitePlotStore
from plot_analytics.api.contracts import save_plot_json
from plot_analytics.core.beat_sheet import (
    DEFAULT_TARGET_WORD_COUNT,
    available_templates,
    generate_beat_sheet,
)


def build_arg_parser() -> argparse.ArgumentParser:
    """Define CLI flags for beat sheet generation."""
    parser = argparse.ArgumentParser(description="Generate a beat sheet for one project.")
    parser.add_argument("--project-id", default="")
    parser.add_argument(
        "--template",
        default="default",
        help=f"Template name; one of {', '.join(available_templates())}.",
    )
    parser.add_argument("--target-word-count", type=int, default=DEFAULT_TARGET_WORD_COUNT)
    parser.add_argument("--output", default="", help="Write the plot JSON to this path.")
    parser.add_argument("--db-path", default="", help="Persist the plot into this SQLite file.")
    parser.add_argument("--list-templates", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Generate the plot and print it (or a summary when written to disk)."""
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    if parsed.list_templates:
        for name in available_templates():
            print(name)
        return

    project_id = str(parsed.project_id).strip()
    if not project_id:
        raise SystemExit("--project-id is required unless --list-templates is given.")
    plot = generate_beat_sheet(str(parsed.template), project_id, int(parsed.target_word_count))

    db_path = str(parsed.db_path).strip()
    if db_path:
        SQLitePlotStore(db_path=Path(db_path)).save_plot_structure(
            project_id=project_id, plot=plot
        )
    output = str(parsed.output).strip()
    if output:
        save_plot_json(Path(output), plot)
        print(f"Plot id: {plot.id}")
        print(f"Beats: {len(plot.beats)}")
        print(f"Written: {output}")
        return
    sys.stdout.write(plot.model_dump_json(indent=2) + "\n")


if __name__ == "__main__":
    main()
