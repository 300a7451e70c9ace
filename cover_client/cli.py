"""cover-client CLI: run and inspect analyses on a remote service.

Usage:
    cover-client version                 Service API version
    cover-client default-settings        Default analysis settings
    cover-client run build.jar           Run an analysis to completion
    cover-client status <id>             Status of an analysis
    cover-client results <id>            One page of results
    cover-client cancel <id>             Cancel an analysis
"""

import argparse
import asyncio
import importlib
import json
import sys
from typing import Any, List, Optional

from cover_client.api.bindings import Bindings
from cover_client.api.schemas import AnalysisResult
from cover_client.api.transport import Transport
from cover_client.configs.base import ClientConfig
from cover_client.core.analysis import Analysis
from cover_client.core.combiner import Combiner
from cover_client.core.options import AnalysisFiles
from cover_client.core.writer import TestWriter
from cover_client.observability import configure_logging


def _json_out(data: Any) -> None:
    """Print data as formatted JSON."""
    print(json.dumps(data, indent=2, default=str))


def _config(args: argparse.Namespace) -> ClientConfig:
    return ClientConfig.from_env(
        api_url=args.api_url,
        log_level=args.log_level,
        log_json=True if args.log_json else None,
    )


def _bindings(config: ClientConfig) -> Bindings:
    return Bindings(Transport(timeout=config.request_timeout))


def _read_bytes(path: Optional[str]) -> Optional[bytes]:
    if path is None:
        return None
    with open(path, "rb") as fh:
        return fh.read()


def load_generator(spec: str) -> Any:
    """Load a code generator from ``module:attr``; classes are instantiated."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Generator must be given as module:attr, got '{spec}'")
    target = getattr(importlib.import_module(module_name), attr)
    return target() if isinstance(target, type) else target


def _print_results(results: List[AnalysisResult], as_json: bool) -> None:
    if as_json:
        _json_out([result.to_wire() for result in results])
        return
    for result in results:
        print(f"  {result.test_name}  ({result.tested_function})")


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def cmd_version(args: argparse.Namespace) -> None:
    """Print the service API version."""
    config = _config(args)
    response = asyncio.run(_bindings(config).get_api_version(config.api_url, config.bindings_options()))
    if args.json:
        _json_out(response.model_dump())
    else:
        print(response.version)


def cmd_default_settings(args: argparse.Namespace) -> None:
    """Print the service's default analysis settings."""
    config = _config(args)
    settings = asyncio.run(_bindings(config).get_default_settings(config.api_url, config.bindings_options()))
    if args.json:
        _json_out(settings)
        return
    for key, value in settings.items():
        print(f"{key}: {json.dumps(value, default=str)}")


def cmd_run(args: argparse.Namespace) -> None:
    """Run an analysis until it ends."""
    config = _config(args)
    overrides = {}
    if args.polling_interval is not None:
        overrides["polling_interval"] = args.polling_interval
    if args.writing_concurrency is not None:
        overrides["writing_concurrency"] = args.writing_concurrency
    if overrides:
        config = config.model_copy(update=overrides)

    writer = None
    if args.generator:
        writer = TestWriter(Combiner(load_generator(args.generator)))
    elif args.output_tests:
        raise ValueError("--output-tests requires --generator")

    settings = None
    if args.settings:
        with open(args.settings, "r", encoding="utf-8") as fh:
            settings = json.load(fh)

    files = AnalysisFiles(
        build=_read_bytes(args.build),
        dependencies_build=_read_bytes(args.dependencies_build),
        base_build=_read_bytes(args.base_build),
    )

    def on_results(group: List[AnalysisResult], file_name: str) -> None:
        if not args.json:
            print(f"{file_name}: {len(group)} new test(s)")
            _print_results(group, as_json=False)

    analysis = Analysis(config.api_url, config.bindings_options(), bindings=_bindings(config), writer=writer)
    options = config.run_options(output_tests=args.output_tests, on_results=on_results)
    results = asyncio.run(analysis.run(files, settings, options))

    if args.json:
        _json_out({
            "id": analysis.analysis_id,
            "status": analysis.status.value,
            "results": [result.to_wire() for result in results],
        })
    else:
        print(f"Analysis {analysis.analysis_id} {analysis.status.value}: {len(results)} test(s)")
        if args.output_tests:
            print(f"Tests written to {args.output_tests}")


def cmd_status(args: argparse.Namespace) -> None:
    """Print the status of an analysis."""
    config = _config(args)
    response = asyncio.run(
        _bindings(config).get_analysis_status(config.api_url, args.analysis_id, config.bindings_options())
    )
    if args.json:
        _json_out(response.model_dump(mode="json"))
        return
    line = f"{args.analysis_id}: {response.status.value}"
    if response.progress is not None:
        line += f" ({response.progress.completed}/{response.progress.total})"
    print(line)
    if response.message is not None:
        print(f"  [{response.message.code}] {response.message.message}")


def cmd_results(args: argparse.Namespace) -> None:
    """Print one page of results of an analysis."""
    config = _config(args)
    response = asyncio.run(
        _bindings(config).get_analysis_results(
            config.api_url, args.analysis_id, args.cursor, config.bindings_options()
        )
    )
    if args.json:
        _json_out({
            "cursor": response.cursor,
            "status": response.status.model_dump(mode="json"),
            "results": [result.to_wire() for result in response.results],
        })
        return
    print(f"{args.analysis_id}: {response.status.status.value}, {len(response.results)} result(s), cursor {response.cursor}")
    _print_results(response.results, as_json=False)


def cmd_cancel(args: argparse.Namespace) -> None:
    """Cancel an analysis."""
    config = _config(args)
    response = asyncio.run(
        _bindings(config).cancel_analysis(config.api_url, args.analysis_id, config.bindings_options())
    )
    if args.json:
        _json_out(response.model_dump(mode="json"))
    else:
        print(f"{args.analysis_id}: {response.status.status.value} {response.message}".rstrip())


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    from cover_client import __version__

    parser = argparse.ArgumentParser(
        prog="cover-client",
        description="cover-client: run unit-test generation analyses",
    )
    parser.add_argument(
        "--version", action="version", version=f"cover-client {__version__}",
    )
    parser.add_argument("--api-url", help="Service base URL (default: $COVER_API_URL)")
    parser.add_argument("--log-level", help="Log level (default: $COVER_LOG_LEVEL or INFO)")
    parser.add_argument("--log-json", action="store_true", help="Log as JSON lines")
    sub = parser.add_subparsers(dest="command")

    # version
    p_version = sub.add_parser("version", help="Show the service API version")
    p_version.add_argument("--json", action="store_true", help="JSON output")

    # default-settings
    p_defaults = sub.add_parser("default-settings", help="Show default analysis settings")
    p_defaults.add_argument("--json", action="store_true", help="JSON output")

    # run
    p_run = sub.add_parser("run", help="Run an analysis to completion")
    p_run.add_argument("build", help="Build artifact to analyse")
    p_run.add_argument("--settings", help="JSON settings file (default: service defaults)")
    p_run.add_argument("--dependencies-build", help="Dependencies build artifact")
    p_run.add_argument("--base-build", help="Base build artifact")
    p_run.add_argument("--output-tests", help="Directory to write the generated tests to")
    p_run.add_argument("--polling-interval", type=float, help="Seconds between polls")
    p_run.add_argument("--writing-concurrency", type=int, help="Test files written in parallel")
    p_run.add_argument("--generator", help="Code generator as module:attr")
    p_run.add_argument("--json", action="store_true", help="JSON output")

    # status
    p_status = sub.add_parser("status", help="Show the status of an analysis")
    p_status.add_argument("analysis_id", help="Analysis ID")
    p_status.add_argument("--json", action="store_true", help="JSON output")

    # results
    p_results = sub.add_parser("results", help="Fetch a page of results")
    p_results.add_argument("analysis_id", help="Analysis ID")
    p_results.add_argument("--cursor", help="Pagination cursor")
    p_results.add_argument("--json", action="store_true", help="JSON output")

    # cancel
    p_cancel = sub.add_parser("cancel", help="Cancel an analysis")
    p_cancel.add_argument("analysis_id", help="Analysis ID")
    p_cancel.add_argument("--json", action="store_true", help="JSON output")

    return parser


COMMAND_MAP = {
    "version": cmd_version,
    "default-settings": cmd_default_settings,
    "run": cmd_run,
    "status": cmd_status,
    "results": cmd_results,
    "cancel": cmd_cancel,
}


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    handler = COMMAND_MAP.get(args.command)
    if handler:
        try:
            config = _config(args)
            configure_logging(config.log_level, json_format=config.log_json)
            handler(args)
        except KeyboardInterrupt:
            print("\nInterrupted.")
            sys.exit(1)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
