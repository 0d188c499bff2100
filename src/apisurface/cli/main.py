"""CLI entrypoint for the API surface coverage report."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path

from apisurface.config.models import (
    DEFAULT_LATEST_VERSION,
    PersistMode,
    ReportConfig,
    SemVer,
)
from apisurface.pipeline.report import run_report
from apisurface.services.errors import ProblemError, log_problem, problem

LOG = logging.getLogger("apisurface.cli")


def _setup_logging(verbosity: int) -> None:
    """
    Configure logging based on -v/--verbose count.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apisurface",
        description="Compute API surface coverage per module and persist its history.",
    )
    parser.add_argument(
        "persist",
        help="Persistence mode: mysql, duckdb, rest; anything else writes CSV only",
    )
    parser.add_argument("version", help="Version being processed (MAJOR.MINOR.PATCH)")
    parser.add_argument(
        "--jsii-dir",
        type=Path,
        default=Path("jsii"),
        help="Directory of assembly manifests (default: ./jsii)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(),
        help="Directory for resources.csv and modules.csv (default: current directory)",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=Path("build/db/apisurface.duckdb"),
        help="DuckDB history database for duckdb mode (default: build/db/apisurface.duckdb)",
    )
    parser.add_argument(
        "--latest-version",
        default=DEFAULT_LATEST_VERSION,
        help=f"Version whose run also replaces module snapshots (default: {DEFAULT_LATEST_VERSION})",
    )
    parser.add_argument(
        "--module-prefix",
        default="",
        help="Only analyze assemblies with this name prefix, e.g. @aws-cdk/aws- (default: any)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v, -vv)",
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> ReportConfig:
    return ReportConfig(
        persist=PersistMode.from_arg(args.persist),
        version=SemVer.parse(args.version),
        manifest_dir=args.jsii_dir,
        output_dir=args.output_dir,
        db_path=args.db_path,
        latest_version=SemVer.parse(args.latest_version),
        module_prefix=args.module_prefix,
    )


def main(argv: Iterable[str] | None = None, *, env: Mapping[str, str] | None = None) -> int:
    """
    CLI entrypoint for the surface coverage report.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to sys.argv).
    env:
        Optional environment mapping (defaults to os.environ).

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _make_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    _setup_logging(args.verbose)

    try:
        cfg = _config_from_args(args)
        run_report(cfg, env=env)
    except ProblemError as exc:
        log_problem(LOG, exc.problem_detail)
        return 1
    except Exception as exc:  # noqa: BLE001 - every failure aborts the run
        pd = problem(
            code="cli.failure",
            title="Report run failed",
            detail=str(exc),
            extras={"persist": args.persist, "version": args.version},
        )
        log_problem(LOG, pd)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
