"""Release discovery: latest tag lookup via the GitHub API and asset architecture."""

from __future__ import annotations

import json
import logging
import platform
import urllib.error
import urllib.request
from typing import TYPE_CHECKING

from . import __version__
from .ui import print_info, print_step, print_warning

if TYPE_CHECKING:
    from . import InstallerContext

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"

# platform.machine() -> release asset suffix
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv7",
    "armv6l": "armv6",
    "armv5tel": "armv5",
    "i386": "386",
    "i686": "386",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "mips64": "mips64",
}


def detect_arch(machine: str | None = None) -> str:
    """Map the host machine type to the node_exporter asset architecture."""
    if machine is None:
        machine = platform.machine()
    arch = _ARCH_MAP.get(machine.lower())
    if arch is None:
        logger.debug(f"Unknown machine type {machine!r}, assuming amd64")
        return "amd64"
    return arch


def parse_tag_name(payload: bytes | str) -> str:
    """Extract the version from a releases API payload, without the leading 'v'.

    Returns an empty string when the payload has no usable tag_name.
    """
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, TypeError, ValueError):
        return ""
    if not isinstance(data, dict):
        return ""
    tag = data.get("tag_name") or ""
    if not isinstance(tag, str):
        return ""
    tag = tag.strip()
    return tag[1:] if tag.startswith("v") else tag


def discover_latest_version(repo: str, *, timeout: float = 10) -> str:
    """Query the GitHub releases API for the latest tag. Returns '' on any failure."""
    api_url = f"{GITHUB_API_BASE}/repos/{repo}/releases/latest"
    logger.debug(f"GET {api_url}")
    req = urllib.request.Request(
        api_url,
        headers={
            "User-Agent": f"node-exporter-installer/{__version__}",
            "Accept": "application/vnd.github+json",
        },
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return parse_tag_name(resp.read())
    except (urllib.error.URLError, OSError, ValueError) as e:
        logger.debug(f"Release lookup failed: {e}")
        return ""


def resolve_version(ctx: InstallerContext) -> str:
    """Fill ctx.version (and ctx.arch) from the pin, the API, or the fallback."""
    print_step("Fetching latest node_exporter release information...")

    if not ctx.arch:
        ctx.arch = detect_arch()

    if ctx.version:
        ctx.version = ctx.version.lstrip("v")
        print_info(f"Using pinned version: {ctx.version}")
        return ctx.version

    latest = discover_latest_version(ctx.repo)
    if not latest:
        print_warning(f"Could not determine latest version, using default {ctx.fallback_version}")
        latest = ctx.fallback_version

    ctx.version = latest
    print_info(f"Latest version detected: {ctx.version}")
    return ctx.version
