"""
Command-line interface for the containermon resource alerting monitor.

This module provides the main CLI entry point: it parses arguments (with
environment-variable fallbacks), loads and validates configuration, wires
the runtime, channels, throttle and orchestrator together, and runs until
SIGINT or SIGTERM.
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..alerting.channels import create_channel
from ..alerting.throttle import NotificationThrottle
from ..config import get_config, set_config_path
from ..models.config import AppConfig
from ..monitoring.orchestrator import SamplingOrchestrator
from ..runtime.factory import create_runtime
from ..validation import ValidationError, handle_cli_error

logger = logging.getLogger(__name__)

ENV_PREFIX = "CONTAINERMON_"
LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


def _env(name: str, fallback: Optional[str] = None) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}", fallback)


def _env_flag(name: str) -> Optional[bool]:
    """True if the variable is set to a truthy string, else None (not set)."""
    value = _env(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Every option defaults to its CONTAINERMON_* environment variable, and
    to None when that is unset so config-file values are not overridden.
    """
    parser = argparse.ArgumentParser(
        prog="containermon",
        description="Watch running containers and alert when CPU or memory stays over threshold.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=_env("CONFIG"),
        help="Path to a config.toml file.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=_env("INTERVAL"),
        help="Seconds between threshold evaluations (default: 10).",
    )
    parser.add_argument(
        "-c",
        "--cpu-threshold",
        type=float,
        default=_env("CPU_THRESHOLD"),
        help="Warn if smoothed %% CPU usage is at or above this level (default: 90).",
    )
    parser.add_argument(
        "-m",
        "--mem-threshold",
        type=float,
        default=_env("MEM_THRESHOLD"),
        help="Warn if %% memory usage is at or above this level (default: 90).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const=True,
        default=_env_flag("VERBOSE"),
        help="Report usage for every container at every interval.",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        type=str,
        default=_env("EXCLUDE"),
        help="Ignore containers whose name matches this regular expression.",
    )
    parser.add_argument(
        "--runtime",
        type=str,
        choices=["docker", "process"],
        default=_env("RUNTIME"),
        help="Where to discover workloads (default: docker).",
    )
    parser.add_argument(
        "-l",
        "--slack-hook",
        type=str,
        default=_env("SLACK_HOOK", os.environ.get("SLACK_HOOK")),
        help="Slack incoming-webhook URL (falls back to SLACK_HOOK).",
    )
    parser.add_argument(
        "-r",
        "--slack-report-rate",
        type=float,
        default=_env("SLACK_REPORT_RATE", "0"),
        help="Minimum seconds between repeated Slack alerts of the same kind (default: 0).",
    )
    parser.add_argument(
        "-e",
        "--emoji",
        type=str,
        default=_env("EMOJI", ":computer:"),
        help='Slack emoji, enclosed in colons (e.g. ":monkey_face:").',
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=_env("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO).",
    )
    return parser


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into configuration overrides."""
    monitor: Dict[str, Any] = {}
    thresholds: Dict[str, Any] = {}

    if args.interval is not None:
        monitor["interval_seconds"] = args.interval
        if args.interval < 2.0:
            # Sampling may not be slower than evaluation.
            monitor["sample_interval_seconds"] = args.interval
    if args.verbose is not None:
        monitor["verbose"] = args.verbose
    if args.exclude:
        monitor["exclude_pattern"] = args.exclude
    if args.runtime:
        monitor["runtime"] = args.runtime
    if args.cpu_threshold is not None:
        thresholds["cpu_percent"] = args.cpu_threshold
    if args.mem_threshold is not None:
        thresholds["memory_percent"] = args.mem_threshold
    if thresholds:
        monitor["thresholds"] = thresholds

    channels: List[Dict[str, Any]] = []
    if args.slack_hook:
        if args.config is None:
            channels.append({"type": "console"})
        channels.append(
            {
                "type": "slack",
                "webhook_url": args.slack_hook,
                "emoji": args.emoji,
                "throttle_seconds": args.slack_report_rate,
            }
        )

    return {"monitor": monitor, "channels": channels}


async def run_monitor(app_config: AppConfig) -> None:
    """Wire up the pipeline and run it until a shutdown signal arrives."""
    runtime = create_runtime(app_config.monitor)
    channels = [create_channel(channel_config) for channel_config in app_config.channels]
    notifier = NotificationThrottle(channels)
    orchestrator = SamplingOrchestrator(runtime, app_config.monitor, notifier)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler(orchestrator, sig))
        except NotImplementedError:
            # Event loops without signal support (e.g. Windows).
            signal.signal(sig, lambda signum, frame: orchestrator.request_shutdown())

    try:
        await orchestrator.run()
    finally:
        runtime.close()
        logger.info(f"Notification stats: {notifier.stats}")


def _signal_handler(orchestrator: SamplingOrchestrator, sig: signal.Signals):
    def handler() -> None:
        logger.info(f"Signal {signal.strsignal(sig)} received. Initiating graceful shutdown...")
        orchestrator.request_shutdown()

    return handler


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for containermon.

    Raises:
        SystemExit: On configuration or validation errors (exit code 1).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.config is not None:
        set_config_path(Path(args.config))

    try:
        app_config = get_config(overrides=build_overrides(args))
    except (FileNotFoundError, ValidationError, ValueError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            logger=logger,
        )

    try:
        asyncio.run(run_monitor(app_config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    logger.info("containermon stopped.")


if __name__ == "__main__":
    main_cli()
