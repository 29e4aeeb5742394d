"""Entry point: python3 -m node_exporter_installer [install|status] [options]"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys

from . import InstallerContext, __version__
from .config import ConfigError, apply_config, load_config
from .system import require_root
from .ui import print_error


def _port(value: str) -> int:
    port = int(value)
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be between 1 and 65535, got {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="node-exporter-installer",
        description="Install Prometheus node_exporter as a systemd service",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config", action="append", default=None, metavar="PATH",
        help="TOML config file (repeatable; replaces the /etc defaults)",
    )
    parser.add_argument("--repo", default=None, help="GitHub repo to read releases from")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    install_p = sub.add_parser("install", help="Download, install and start node_exporter (default)")
    install_p.add_argument("--release", default=None, metavar="VERSION", help="Install this version instead of the latest")
    install_p.add_argument("--arch", default=None, help="Release architecture (default: detected)")
    install_p.add_argument("--port", type=_port, default=None, help="Listen port (default 9100)")
    install_p.add_argument("--user", default=None, help="Service account used with --yes")
    install_p.add_argument("-y", "--yes", action="store_true", help="Non-interactive: accept every default")
    install_p.add_argument("--keep-files", action="store_true", help="Keep the downloaded tarball and directory")

    status_p = sub.add_parser("status", help="Check an existing installation")
    status_p.add_argument("--port", type=_port, default=None, help="Listen port (default 9100)")

    return parser


def build_context(args: argparse.Namespace) -> InstallerContext:
    """Defaults, then config files, then environment, then command-line flags."""
    ctx = InstallerContext()
    apply_config(ctx, load_config(args.config))

    env_repo = os.environ.get("NODE_EXPORTER_REPO")
    if env_repo:
        ctx.repo = env_repo
    env_version = os.environ.get("NODE_EXPORTER_VERSION")
    if env_version:
        ctx.version = env_version

    if args.repo:
        ctx.repo = args.repo
    if getattr(args, "port", None) is not None:
        ctx.listen_port = args.port

    if args.command == "install":
        if args.release:
            ctx.version = args.release
        if args.arch:
            ctx.arch = args.arch
        if args.user:
            ctx.svc_user = args.user
            ctx.svc_group = args.user
        if args.yes:
            ctx.auto = True
        if args.keep_files:
            ctx.keep_files = True
    return ctx


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        args = parser.parse_args([*argv, "install"])

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    try:
        ctx = build_context(args)
    except ConfigError as e:
        print_error(f"Invalid configuration: {e}")
        raise SystemExit(1)

    require_root()

    try:
        if args.command == "install":
            from .install_cmd import run_install
            run_install(ctx)
        elif args.command == "status":
            from .status_cmd import run_status
            if not run_status(ctx):
                raise SystemExit(1)
    except subprocess.CalledProcessError as e:
        cmd = e.cmd if isinstance(e.cmd, str) else " ".join(e.cmd)
        print_error(f"Command failed with exit status {e.returncode}: {cmd}")
        raise SystemExit(1)
    except EOFError:
        print_error("Input ended before the installer finished asking questions (use --yes for unattended runs)")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
