"""Health check for an existing node_exporter installation."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .install_cmd import verify_installation
from .service import service_active
from .system import binary_version
from .ui import print_banner, print_info, print_warning

if TYPE_CHECKING:
    from . import InstallerContext


def run_status(ctx: InstallerContext) -> bool:
    """Report binary, service and endpoint state. Returns True when healthy."""
    print_banner("node_exporter status")

    if os.path.exists(ctx.bin_path):
        version = binary_version(ctx.bin_path)
        if version:
            print_info(version.splitlines()[0])
        else:
            print_warning(f"{ctx.bin_path} exists but does not run")
    else:
        print_warning(f"No binary found at {ctx.bin_path}")

    if service_active(ctx.service_name):
        print_info(f"Service {ctx.service_name} is active")
    else:
        print_warning(f"Service {ctx.service_name} is not active")

    ctx.verify_wait = 0
    return verify_installation(ctx, banner=False)
