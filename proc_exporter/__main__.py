import argparse
from typing import Optional, Sequence

import uvicorn

from .config import Settings, settings
from .logger import logger
from .main import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proc-exporter",
        description="Export CPU, memory and PID gauges of named processes.",
    )
    parser.add_argument("processes", nargs="*", metavar="NAME")
    parser.add_argument("--host", type=str, default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.interval,
        help="seconds between updates, also the staleness threshold",
    )
    parser.add_argument(
        "--abort-on-sample-error",
        action="store_true",
        default=settings.abort_on_sample_error,
        help="stop the current pass on the first failed read",
    )
    parser.add_argument(
        "--no-report",
        dest="report_enabled",
        action="store_false",
        default=settings.report_enabled,
        help="do not print metrics to the console",
    )
    return parser


def parse_args(
    argv: Optional[Sequence[str]] = None,
) -> tuple[list[str], Settings]:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.processes:
        parser.error("at least one process name is required")
    if args.interval <= 0:
        parser.error("--interval must be positive")

    app_settings = settings.model_copy(
        update={
            "host": args.host,
            "port": args.port,
            "interval": args.interval,
            "abort_on_sample_error": args.abort_on_sample_error,
            "report_enabled": args.report_enabled,
        }
    )
    return args.processes, app_settings


def main(argv: Optional[Sequence[str]] = None) -> None:
    process_names, app_settings = parse_args(argv)
    app = create_app(process_names, app_settings)

    try:
        uvicorn.run(app, host=app_settings.host, port=app_settings.port, reload=False)
    except SystemExit as e:
        if e.code:
            logger.critical(
                f"Failed to start HTTP server on "
                f"{app_settings.host}:{app_settings.port}"
            )
        raise


if __name__ == "__main__":
    main()
