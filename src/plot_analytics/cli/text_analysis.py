"""CLI for running one text analytics kind over local files."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import Any

from plot_analytics.adapters.analysis_backends import create_analysis_backend
from plot_analytics.adapters.observability import configure_runtime_logging
from plot_analytics.application.analysis_service import AnalysisService

TEXT_KINDS = (
    "text",
    "advanced_text",
    "narrative_patterns",
    "style_consistency",
    "writing_suggestions",
    "text_optimization",
)


def build_arg_parser() -> argparse.ArgumentParser:
    """Define CLI flags for text analytics."""
    parser = argparse.ArgumentParser(description="Analyze manuscript text files.")
    parser.add_argument("inputs", nargs="+", help="UTF-8 text files to analyze.")
    parser.add_argument("--kind", choices=TEXT_KINDS, default="text")
    parser.add_argument(
        "--analysis-backend",
        choices=["none", "native", "http"],
        default=None,
        help="Deep analysis collaborator (default: PLOT_ANALYTICS_ANALYSIS_BACKEND or none).",
    )
    parser.add_argument("--pattern-type", default="story_structure")
    parser.add_argument("--author-id", default="author")
    parser.add_argument("--target-style", default="general")
    parser.add_argument(
        "--focus-area",
        action="append",
        dest="focus_areas",
        default=None,
        help="Repeatable; defaults to pacing and clarity.",
    )
    parser.add_argument("--optimization-target", default="readability")
    return parser


def _arguments_for(kind: str, texts: list[str], parsed: argparse.Namespace) -> dict[str, Any]:
    if kind == "style_consistency":
        return {"texts": texts, "author_id": str(parsed.author_id)}
    text = "\n\n".join(texts)
    if kind == "narrative_patterns":
        return {"text": text, "pattern_type": str(parsed.pattern_type)}
    if kind == "writing_suggestions":
        return {
            "text": text,
            "target_style": str(parsed.target_style),
            "focus_areas": parsed.focus_areas or ["pacing", "clarity"],
        }
    if kind == "text_optimization":
        return {"text": text, "optimization_target": str(parsed.optimization_target)}
    return {"text": text}


def main(argv: list[str] | None = None) -> None:
    """Run the selected analysis and print a JSON envelope."""
    configure_runtime_logging()
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    if parsed.analysis_backend is not None:
        os.environ["PLOT_ANALYTICS_ANALYSIS_BACKEND"] = str(parsed.analysis_backend)

    texts: list[str] = []
    for raw_path in parsed.inputs:
        path = Path(str(raw_path))
        if not path.is_file():
            raise SystemExit(f"Input file not found: {path}")
        texts.append(path.read_text(encoding="utf-8"))

    kind = str(parsed.kind)
    service = AnalysisService(create_analysis_backend())
    outcome = asyncio.run(service.run_analysis(kind, **_arguments_for(kind, texts, parsed)))
    envelope = {
        "kind": kind,
        "backend": service.backend_name,
        "fallback_used": outcome.fallback_used,
        "error": outcome.error,
        "result": outcome.result.model_dump(mode="json"),
    }
    print(json.dumps(envelope, indent=2))


if __name__ == "__main__":
    main()
