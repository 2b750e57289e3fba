"""CLI entrypoint for serving the plot_analytics HTTP API."""

from __future__ import annotations

import argparse
import os

import uvicorn

from plot_analytics.adapters.observability import configure_runtime_logging


def build_arg_parser() -> argparse.ArgumentParser:
    """Create CLI args for the local API server process."""
    parser = argparse.ArgumentParser(description="Serve plot_analytics API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument(
        "--db-path",
        default="",
        help="SQLite path for plot persistence (default: work/local/plot_analytics.db).",
    )
    parser.add_argument(
        "--analysis-backend",
        choices=["none", "native", "http"],
        default=None,
        help="Deep analysis collaborator (default: PLOT_ANALYTICS_ANALYSIS_BACKEND or none).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI flags and start uvicorn with the app factory path."""
    configure_runtime_logging()
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    db_path = str(parsed.db_path).strip()
    if db_path:
        os.environ["PLOT_ANALYTICS_DB_PATH"] = db_path
    if parsed.analysis_backend is not None:
        os.environ["PLOT_ANALYTICS_ANALYSIS_BACKEND"] = str(parsed.analysis_backend)
    uvicorn.run(
        "plot_analytics.api.app:app",
        host=str(parsed.host),
        port=int(parsed.port),
        reload=bool(parsed.reload),
    )


if __name__ == "__main__":
    main()
