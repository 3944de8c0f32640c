"""
logflow entry point with two roles:

1. DASHBOARD: no source flags. Binds the socket and runs the terminal UI.
2. FEEDER: ``--source``, ``--docker`` or ``--podman``. Streams lines into a
   running dashboard and exits when its input ends.

Usage:
    logflow
    python app.py | logflow --source backend
    logflow --docker redis --source cache
    logflow --podman db
"""
from __future__ import annotations

import argparse
import signal
import sys
from typing import List, Optional

from .config import DashboardConfig, load_config
from .context import SessionContext
from .ipc.client import IPCClient
from .ipc.protocol import TransportError
from .sources import DockerSource, LogSource, PipeSource, PodmanSource
from .utils import load_env_file, redirect_logs_to_file, restore_stderr_logging, setup_logger

logger = setup_logger("logflow.runner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logflow",
        description="Multi-source log viewer for development",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    logflow                                     # Start the dashboard
    python app.py | logflow --source backend    # Pipe logs to the dashboard
    logflow --docker redis --source redis       # Follow a Docker container
        """,
    )
    parser.add_argument("-s", "--source", default=None, help="Source name for this log stream.")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--docker", default=None, metavar="CONTAINER", help="Docker container name/ID to follow.")
    group.add_argument("--podman", default=None, metavar="CONTAINER", help="Podman container name/ID to follow.")

    parser.add_argument("--socket", default=None, help="Unix socket path shared by dashboard and sources.")
    parser.add_argument("--config", default=None, help="Path to dashboard config JSON.")
    parser.add_argument("--env-file", default=".env.local", help="Environment file.")
    parser.add_argument("--buffer-size", type=int, default=None, help="Entries kept per pane.")
    parser.add_argument(
        "--layout",
        choices=["horizontal", "vertical", "grid"],
        default=None,
        help="Initial dashboard layout.",
    )
    parser.add_argument("--log-level", default=None, help="Level for logflow's own diagnostics.")
    return parser


def resolve_config(args: argparse.Namespace) -> DashboardConfig:
    load_env_file(args.env_file)
    config = load_config(args.config)
    if args.socket:
        config.socket_path = args.socket
    if args.buffer_size is not None:
        config.buffer_size = args.buffer_size
    if args.layout:
        config.default_layout = args.layout
    if args.log_level:
        config.log_level = args.log_level.upper()
    return config


def build_source(args: argparse.Namespace) -> Optional[LogSource]:
    if args.docker:
        return DockerSource(args.source or args.docker, args.docker)
    if args.podman:
        return PodmanSource(args.source or args.podman, args.podman)
    if args.source:
        return PipeSource(args.source, sys.stdin)
    return None


def run_dashboard(config: DashboardConfig) -> int:
    """Mode 1: own the socket and run the terminal UI until the user quits."""
    redirect_logs_to_file(config.log_file, config.log_level)
    try:
        session = SessionContext.create(config)
        try:
            session.start()
        except TransportError as exc:
            logger.error("Cannot start dashboard (%s): %s", exc.code, exc)
            print(f"Error: {exc}", file=sys.stderr)
            return 1

        from .tui import LogflowDashboard

        app = LogflowDashboard(session)
        try:
            app.run()
        except KeyboardInterrupt:
            pass
        finally:
            session.close()
        return 0
    finally:
        restore_stderr_logging()


def run_feeder(source: LogSource, config: DashboardConfig) -> int:
    """Mode 2: stream one source into the running dashboard."""
    logger.setLevel(config.log_level)
    try:
        client = IPCClient.connect(config.socket_path, timeout=5.0)
    except TransportError as exc:
        logger.error("%s", exc)
        return 1

    # SIGTERM ends a feeder the same way Ctrl+C does.
    signal.signal(signal.SIGTERM, signal.default_int_handler)
    try:
        with client:
            try:
                source.stream(client)
            except KeyboardInterrupt:
                source.close()
                try:
                    client.send_exit(source.name)
                except TransportError:
                    pass
                logger.info("Source %s interrupted after %d lines", source.name, source.sent)
    except TransportError as exc:
        source.close()
        logger.error("Lost dashboard while streaming %s (%s): %s", source.name, exc.code, exc)
        return 1
    except OSError as exc:
        source.close()
        logger.error("Source %s failed: %s", source.name, exc)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = resolve_config(args)
    except (OSError, ValueError) as exc:
        parser.error(f"invalid config: {exc}")
    errors = config.validate()
    if errors:
        parser.error("; ".join(errors))

    try:
        source = build_source(args)
    except ValueError as exc:
        parser.error(str(exc))
    if source is None:
        return run_dashboard(config)
    return run_feeder(source, config)


if __name__ == "__main__":
    sys.exit(main())
