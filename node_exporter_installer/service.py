"""systemd unit generation and service lifecycle."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import TYPE_CHECKING

from .system import run_cmd
from .ui import print_error, print_info, print_step

if TYPE_CHECKING:
    from . import InstallerContext

logger = logging.getLogger(__name__)

MOUNT_POINTS_EXCLUDE = (
    "^/(sys|proc|dev|host|etc|rootfs/var/lib/docker/containers"
    "|rootfs/var/lib/docker/overlay2|rootfs/run/docker/netns"
    "|rootfs/var/lib/docker/aufs)($$|/)"
)


def exec_start_args(ctx: InstallerContext) -> list[str]:
    """Command line for ExecStart, binary first."""
    args = [
        ctx.bin_path,
        f"--web.listen-address=:{ctx.listen_port}",
        "--path.procfs=/proc",
        "--path.sysfs=/sys",
        f"--collector.filesystem.mount-points-exclude='{MOUNT_POINTS_EXCLUDE}'",
    ]
    args.extend(ctx.extra_args)
    return args


def render_unit(ctx: InstallerContext) -> str:
    """Render the systemd unit file for the exporter."""
    exec_start = " \\\n    ".join(exec_start_args(ctx))
    return f"""[Unit]
Description=Node Exporter
Documentation=https://prometheus.io/docs/guides/node-exporter/
Wants=network-online.target
After=network-online.target

[Service]
User={ctx.svc_user}
Group={ctx.svc_group}
Type=simple
Restart=on-failure
RestartSec=5s
ExecStart={exec_start}

[Install]
WantedBy=multi-user.target
"""


def write_unit(ctx: InstallerContext) -> Path:
    print_step("Creating systemd service...")
    unit_path = Path(ctx.unit_path)
    os.makedirs(unit_path.parent, exist_ok=True)
    unit_path.write_text(render_unit(ctx))
    os.chmod(unit_path, 0o644)
    print_info(f"systemd unit written to {unit_path}")
    return unit_path


def service_active(name: str) -> bool:
    try:
        result = run_cmd(["systemctl", "is-active", "--quiet", name], check=False)
    except OSError as e:
        logger.debug(f"systemctl unavailable: {e}")
        return False
    return result.returncode == 0


def stop_if_running(ctx: InstallerContext) -> bool:
    """Stop an existing, active service so its binary can be replaced.

    Returns True if the service was stopped.
    """
    if not Path(ctx.unit_path).exists():
        return False
    if not service_active(ctx.service_name):
        return False
    print_info(f"Stopping running {ctx.service_name} service...")
    run_cmd(["systemctl", "stop", ctx.service_name])
    return True


def start_service(ctx: InstallerContext) -> None:
    """Reload units, enable and start the service, then confirm it is active."""
    print_step("Starting node_exporter service...")
    name = ctx.service_name

    run_cmd(["systemctl", "daemon-reload"])
    run_cmd(["systemctl", "enable", name])
    run_cmd(["systemctl", "start", name])

    time.sleep(ctx.startup_wait)

    if service_active(name):
        print_info("node_exporter service started")
        run_cmd(["systemctl", "status", name, "--no-pager", "-l"], check=False)
    else:
        print_error("node_exporter service failed to start")
        print_error(f"Check the logs: journalctl -u {name} -f")
        raise SystemExit(1)
