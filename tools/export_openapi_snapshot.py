#!/usr/bin/env python3
"""Write the plot_analytics OpenAPI schema to disk or verify a committed copy."""

from __future__ import annotations

import argparse
import json
import tempfile
from pathlib import Path
from typing import Any

from plot_analytics.api.app import create_app


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export the plot_analytics OpenAPI schema.")
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Snapshot file to write, or to compare against with --check.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit non-zero when the file on disk differs from the generated schema.",
    )
    return parser


def generate_schema() -> dict[str, Any]:
    """Build the schema from a throwaway app so no project database is touched."""
    with tempfile.TemporaryDirectory() as scratch:
        return create_app(db_path=Path(scratch) / "schema.db").openapi()


def render(schema: dict[str, Any]) -> str:
    return json.dumps(schema, indent=2, sort_keys=True) + "\n"


def snapshot_drift(path: Path, schema: dict[str, Any]) -> str | None:
    """Describe why ``path`` does not hold ``schema``; ``None`` when it matches."""
    if not path.exists():
        return f"OpenAPI snapshot missing: {path}"
    if json.loads(path.read_text(encoding="utf-8")) != schema:
        return f"OpenAPI snapshot drift detected in {path}; rerun without --check."
    return None


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    output_path = Path(args.output).resolve()
    schema = generate_schema()
    if args.check:
        problem = snapshot_drift(output_path, schema)
        if problem is not None:
            print(problem)
            return 1
        return 0
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render(schema), encoding="utf-8")
    print(f"Wrote OpenAPI snapshot: {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
