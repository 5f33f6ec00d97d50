"""
Command-line interface for llcm.

Subcommands:
  list        List log group entries
  preview     Preview simulation results based on a desired state
  apply       Apply a desired state to log group entries
  completion  Print a shell completion script
"""

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import structlog

from llcm import __version__
from llcm.completions import get_completion_script, supported_shells
from llcm.config.settings import LlcmSettings, load_settings
from llcm.connectors.factory import LogsClientFactory
from llcm.errors import LlcmError
from llcm.lifecycle.manager import LifecycleManager
from llcm.lifecycle.models import (
    TOTAL_REDUCIBLE_BYTES_LABEL,
    TOTAL_REMAINING_BYTES_LABEL,
    TOTAL_STORED_BYTES_LABEL,
    DesiredState,
    OutputType,
    sort_entries,
)
from llcm.logging_config import setup_logging
from llcm.rendering.renderer import Renderer

logger = structlog.get_logger(__name__)


def _started() -> None:
    logger.info("started", at=datetime.now(timezone.utc).isoformat(timespec="seconds"))


def _new_manager(args: argparse.Namespace, settings: LlcmSettings) -> LifecycleManager:
    client = LogsClientFactory.create_client(settings.client_type, settings)
    manager = LifecycleManager(client, settings)
    try:
        manager.set_regions(args.region)
        manager.set_filter(args.filter)
        if getattr(args, "desired", None):
            manager.set_desired_state(args.desired)
    except LlcmError:
        client.close()
        raise
    return manager


async def run_list(args: argparse.Namespace, settings: LlcmSettings) -> int:
    """Run the list subcommand."""
    output_type = OutputType.parse(args.output or settings.output_type)
    _started()
    manager = _new_manager(args, settings)
    try:
        data = await manager.list()
    finally:
        manager.client.close()
    logger.debug("manager", config=str(manager))

    sort_entries(data)
    Renderer(data, output_type, sys.stdout, open_browser=True).render()

    totals = data.totals()
    logger.info("stopped", **{TOTAL_STORED_BYTES_LABEL: f"{totals[TOTAL_STORED_BYTES_LABEL]:,}"})
    return 0


async def run_preview(args: argparse.Namespace, settings: LlcmSettings) -> int:
    """Run the preview subcommand."""
    output_type = OutputType.parse(args.output or settings.output_type)
    _started()
    manager = _new_manager(args, settings)
    try:
        data = await manager.preview()
    finally:
        manager.client.close()
    logger.debug("manager", config=str(manager))

    sort_entries(data)
    Renderer(data, output_type, sys.stdout, open_browser=True).render()

    totals = data.totals()
    logger.info(
        "stopped",
        **{
            TOTAL_STORED_BYTES_LABEL: f"{totals[TOTAL_STORED_BYTES_LABEL]:,}",
            TOTAL_REDUCIBLE_BYTES_LABEL: f"{totals[TOTAL_REDUCIBLE_BYTES_LABEL]:,}",
            TOTAL_REMAINING_BYTES_LABEL: f"{totals[TOTAL_REMAINING_BYTES_LABEL]:,}",
        },
    )
    return 0


async def run_apply(args: argparse.Namespace, settings: LlcmSettings) -> int:
    """Run the apply subcommand. Mutation lines go to stdout."""
    _started()
    manager = _new_manager(args, settings)
    try:
        applied = await manager.apply(sys.stdout)
    except (Exception, asyncio.CancelledError):
        logger.error("aborted", applied=manager.applied)
        raise
    finally:
        sys.stdout.flush()
        manager.client.close()
    logger.debug("manager", config=str(manager))

    logger.info("stopped", applied=applied)
    return 0


COMMANDS = {
    "list": run_list,
    "preview": run_preview,
    "apply": run_apply,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llcm",
        description=(
            "A listing, updating, and deleting tool to manage the lifecycle of Amazon CloudWatch Logs.\n"
            "It handles multiple regions fast while avoiding throttling. It can also return\n"
            "simulation results based on the desired state."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List log groups in two regions, largest first
  llcm list -r us-east-1 -r ap-northeast-1

  # Preview the effect of a one-year retention on production groups
  llcm preview -d 1year -f "name =~* ^prod-" -o markdown

  # Delete groups that never expire and hold nothing
  llcm apply -d delete -f "retention == infinite" -f "bytes == 0"
        """,
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--profile', '-p', help='Set AWS profile (env: AWS_PROFILE)')
    common.add_argument('--log-level', '-l', help='Set log level: debug, info, warn, error (env: LLCM_LOG_LEVEL)')
    common.add_argument('--region', '-r', action='append',
                        help='Set target region, repeatable (default: all regions with no opt-in)')
    common.add_argument('--filter', '-f', action='append',
                        help="Set an expression to filter log groups, e.g. 'bytes > 1024', repeatable")
    common.add_argument('--config', type=Path, help='Path to a YAML settings file')

    desired_help = 'Set the desired state: ' + ', '.join(DesiredState.tokens())
    output_help = ('Set output type: ' + ', '.join(str(t) for t in OutputType)
                   + ' (env: LLCM_OUTPUT_TYPE, default: compressedtext)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    list_parser = subparsers.add_parser('list', parents=[common], help='List log group entries')
    list_parser.add_argument('--output', '-o', help=output_help)

    preview_parser = subparsers.add_parser('preview', parents=[common],
                                           help='Preview simulation results based on desired state')
    preview_parser.add_argument('--desired', '-d', required=True, help=desired_help)
    preview_parser.add_argument('--output', '-o', help=output_help)

    apply_parser = subparsers.add_parser('apply', parents=[common],
                                         help='Apply desired state to log group entries')
    apply_parser.add_argument('--desired', '-d', required=True, help=desired_help)

    completion_parser = subparsers.add_parser('completion', help='Print a shell completion script')
    completion_parser.add_argument('shell', choices=supported_shells())

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == 'completion':
        sys.stdout.write(get_completion_script(args.shell))
        return 0

    try:
        settings = load_settings(args.config)
        if args.profile:
            settings = settings.model_copy(update={"profile": args.profile})
        setup_logging(args.log_level or settings.log_level)
    except LlcmError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(COMMANDS[args.command](args, settings))
    except LlcmError as e:
        logger.error("failed", error=str(e))
        return 1
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.error("operation cancelled")
        return 1
    except Exception as e:
        logger.exception("unexpected error", error=str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
