"""System operations: subprocess wrappers, packages, downloads, accounts, probes."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tarfile
import urllib.error
import urllib.request

from .ui import print_error, print_info, print_warning

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Subprocess helpers
# ---------------------------------------------------------------------------

def run_cmd(
    cmd: list[str] | str,
    *,
    check: bool = True,
    capture: bool = False,
    shell: bool = False,
    **kwargs,
) -> subprocess.CompletedProcess:
    """Run a command, optionally capturing output."""
    logger.debug(f"Running: {cmd if isinstance(cmd, str) else ' '.join(cmd)}")
    return subprocess.run(
        cmd,
        check=check,
        capture_output=capture,
        text=True,
        shell=shell,
        **kwargs,
    )


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def require_root() -> None:
    """Verify the installer is running as root."""
    if os.geteuid() != 0:
        print_error("This installer must be run as root.")
        print_info("Re-run with: sudo python3 -m node_exporter_installer")
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# Package manager
# ---------------------------------------------------------------------------

def detect_package_manager() -> str | None:
    """Return the first supported package manager found on PATH."""
    for pm in ("apt-get", "yum", "dnf"):
        if command_exists(pm):
            return pm
    return None


def install_dependencies() -> str | None:
    """Make sure a download tool is present. Returns the package manager used."""
    pm = detect_package_manager()
    if pm is None:
        print_warning("Unrecognized package manager, make sure wget or curl is installed")
        return None

    if command_exists("wget") or command_exists("curl"):
        logger.debug(f"Download tool present, nothing to install ({pm})")
        return pm

    print_info("Installing download tools...")
    if pm == "apt-get":
        run_cmd(["apt-get", "update", "-qq"])
    run_cmd([pm, "install", "-y", "wget", "curl"])
    return pm


# ---------------------------------------------------------------------------
# Download and extraction
# ---------------------------------------------------------------------------

def download_file(url: str, dest: str) -> None:
    """Download url to dest with wget, or curl when wget is missing.

    Raises SystemExit(1) when no tool is available or the result is empty.
    """
    if command_exists("wget"):
        run_cmd(["wget", "-O", dest, url])
    elif command_exists("curl"):
        run_cmd(["curl", "-fL", "-o", dest, url])
    else:
        print_error("No download tool found (wget or curl)")
        raise SystemExit(1)

    if not os.path.isfile(dest) or os.path.getsize(dest) == 0:
        print_error("Download failed or file is empty")
        raise SystemExit(1)


def extract_tarball(tarball: str, dest_dir: str, expected_dir: str) -> str:
    """Extract a .tar.gz into dest_dir and return the path of expected_dir inside it."""
    try:
        with tarfile.open(tarball, "r:gz") as tf:
            if hasattr(tarfile, "data_filter"):
                tf.extractall(dest_dir, filter="data")
            else:
                tf.extractall(dest_dir)
    except (tarfile.TarError, OSError) as e:
        print_error(f"Extraction failed: {e}")
        raise SystemExit(1)

    extracted = os.path.join(dest_dir, expected_dir)
    if not os.path.isdir(extracted):
        print_error(f"Extraction failed, directory {expected_dir} not found")
        raise SystemExit(1)
    return extracted


def remove_path(path: str) -> None:
    """Remove a file or directory tree if it exists."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.unlink(path)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

def user_exists(name: str) -> bool:
    result = run_cmd(["id", name], check=False, capture=True)
    return result.returncode == 0


def create_system_user(name: str) -> None:
    """Create a no-login account without a home directory, unless it exists."""
    if user_exists(name):
        print_info(f"User {name} already exists")
        return
    print_info(f"Creating dedicated user: {name}")
    run_cmd(["useradd", "--no-create-home", "--shell", "/bin/false", name])


def create_login_user(name: str, password: str) -> None:
    """Create a regular account with a home directory and set its password."""
    print_info(f"Creating regular user: {name}")
    run_cmd(["useradd", "-m", "-s", "/bin/bash", name])
    run_cmd(["chpasswd"], input=f"{name}:{password}\n")
    print_info(f"User {name} created")


# ---------------------------------------------------------------------------
# Binary
# ---------------------------------------------------------------------------

def install_binary(src: str, dest: str) -> None:
    """Copy the exporter binary into place as root:root 0755."""
    if not os.path.isfile(src):
        print_error(f"node_exporter binary not found at {src}")
        raise SystemExit(1)
    shutil.copy2(src, dest)
    shutil.chown(dest, "root", "root")
    os.chmod(dest, 0o755)


def binary_version(path: str) -> str | None:
    """Return the '--version' output of the binary, or None if it does not run."""
    try:
        result = run_cmd([path, "--version"], check=False, capture=True)
    except OSError:
        return None
    if result.returncode != 0:
        return None
    # node_exporter prints its version banner on stderr in older releases
    return (result.stdout or result.stderr).strip()


# ---------------------------------------------------------------------------
# Network probes
# ---------------------------------------------------------------------------

def port_listening(port: int) -> bool:
    """Check `ss -tlnp` for a listener on the given port."""
    try:
        result = run_cmd(["ss", "-tlnp"], check=False, capture=True)
    except OSError as e:
        logger.debug(f"ss unavailable: {e}")
        return False
    if result.returncode != 0:
        logger.debug(f"ss failed: {result.stderr.strip()}")
        return False
    needle = f":{port}"
    for line in result.stdout.splitlines():
        for column in line.split():
            if column.endswith(needle):
                return True
    return False


def fetch_metrics(port: int, *, timeout: float = 5) -> bool:
    """Return True if http://localhost:<port>/metrics answers with 200."""
    url = f"http://localhost:{port}/metrics"
    logger.debug(f"GET {url}")
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:
            return resp.status == 200
    except (urllib.error.URLError, OSError) as e:
        logger.debug(f"Metrics probe failed: {e}")
        return False


def primary_ip() -> str:
    """First address reported by `hostname -I`, or 'localhost'."""
    try:
        result = run_cmd(["hostname", "-I"], check=False, capture=True)
    except OSError:
        return "localhost"
    addresses = result.stdout.split() if result.returncode == 0 else []
    return addresses[0] if addresses else "localhost"
