"""Fresh install orchestration for node_exporter."""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

from .release import resolve_version
from .service import start_service, stop_if_running, write_unit
from .system import (
    binary_version,
    create_login_user,
    create_system_user,
    download_file,
    extract_tarball,
    fetch_metrics,
    install_binary,
    install_dependencies,
    port_listening,
    primary_ip,
    remove_path,
    user_exists,
)
from .ui import (
    print_banner,
    print_done,
    print_error,
    print_info,
    print_menu,
    print_section,
    print_step,
    print_warning,
    prompt_input,
    prompt_secret,
    prompt_yes_no,
)

if TYPE_CHECKING:
    from . import InstallerContext


def run_install(ctx: InstallerContext) -> None:
    """Run the full installation pipeline."""
    print_banner("node_exporter installer")

    resolve_version(ctx)

    print_step("Checking system dependencies...")
    install_dependencies()

    check_existing_files(ctx)
    download(ctx)
    extract(ctx)
    select_service_user(ctx)
    install(ctx)
    write_unit(ctx)
    start_service(ctx)
    verify_installation(ctx)
    cleanup(ctx)

    print_done("node_exporter installation complete!")


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

def check_existing_files(ctx: InstallerContext) -> None:
    """Decide whether the tarball and extracted directory need to be fetched again."""
    print_step("Checking for existing files...")
    os.makedirs(ctx.download_dir, exist_ok=True)

    tarball = ctx.tarball_path
    ctx.need_download = True
    if os.path.isfile(tarball):
        if os.path.getsize(tarball) == 0:
            print_warning(f"Found empty download {tarball}, fetching it again")
            os.unlink(tarball)
        else:
            print_info(f"Found downloaded file: {os.path.basename(tarball)}")
            if not ctx.auto and prompt_yes_no("Download it again?", "n"):
                os.unlink(tarball)
            else:
                ctx.need_download = False

    ctx.need_extract = True
    if os.path.isdir(ctx.extract_path):
        print_info(f"Found extracted directory: {ctx.filename}")
        if not ctx.auto and prompt_yes_no("Extract it again?", "n"):
            remove_path(ctx.extract_path)
        else:
            ctx.need_extract = False


def download(ctx: InstallerContext) -> None:
    if not ctx.need_download:
        print_info("Skipping download, using existing file")
        return
    print_step(f"Downloading node_exporter {ctx.version}...")
    download_file(ctx.download_url, ctx.tarball_path)
    print_info("Download complete")


def extract(ctx: InstallerContext) -> None:
    if not ctx.need_extract:
        print_info("Skipping extraction, using existing directory")
        return
    print_step("Extracting archive...")
    extract_tarball(ctx.tarball_path, ctx.download_dir, ctx.filename)
    print_info("Extraction complete")


# ---------------------------------------------------------------------------
# Service account
# ---------------------------------------------------------------------------

def select_service_user(ctx: InstallerContext) -> str:
    """Choose (and create if needed) the account the service runs as."""
    print_step("Configuring service user...")

    if ctx.auto:
        if ctx.svc_user == "root":
            print_warning("Running as root (not recommended for production)")
        else:
            create_system_user(ctx.svc_user)
        ctx.svc_group = ctx.svc_group or ctx.svc_user
        return ctx.svc_user

    print_menu("Service user options:", [
        "Dedicated user node_exporter (recommended, no login)",
        "root (simple but insecure)",
        "Custom user",
    ])
    choice = prompt_input("Choose [1-3]")

    if choice == "1":
        ctx.svc_user = "node_exporter"
        create_system_user(ctx.svc_user)
    elif choice == "2":
        ctx.svc_user = "root"
        print_warning("Running as root (not recommended for production)")
    elif choice == "3":
        ctx.svc_user = _prompt_custom_user()
    else:
        print_error("Invalid choice, using default user node_exporter")
        ctx.svc_user = "node_exporter"
        create_system_user(ctx.svc_user)

    ctx.svc_group = ctx.svc_user
    return ctx.svc_user


def _prompt_custom_user() -> str:
    name = ""
    while not name:
        name = prompt_input("Username").strip()

    if user_exists(name):
        print_info(f"User {name} already exists")
    elif prompt_yes_no("Create as a system user (no login)?", "y"):
        create_system_user(name)
    else:
        create_login_user(name, prompt_secret("Password"))
    return name


# ---------------------------------------------------------------------------
# Binary
# ---------------------------------------------------------------------------

def install(ctx: InstallerContext) -> None:
    print_step("Installing node_exporter binary...")

    stop_if_running(ctx)
    os.makedirs(ctx.bin_dir, exist_ok=True)
    install_binary(os.path.join(ctx.extract_path, "node_exporter"), ctx.bin_path)

    version = binary_version(ctx.bin_path)
    if version is None:
        print_error("node_exporter installation failed")
        raise SystemExit(1)
    print_info("node_exporter installed")
    print(version)


# ---------------------------------------------------------------------------
# Verification and cleanup
# ---------------------------------------------------------------------------

def verify_installation(ctx: InstallerContext, *, banner: bool = True) -> bool:
    """Probe the listening port and metrics endpoint. Returns True if metrics answer."""
    print_step("Verifying installation...")
    port = ctx.listen_port

    if port_listening(port):
        print_info(f"✓ Port {port} is listening")
    else:
        print_warning(f"✗ Port {port} is not listening")

    time.sleep(ctx.verify_wait)
    healthy = fetch_metrics(port)
    if healthy:
        print_info("✓ metrics endpoint is responding")
        if banner:
            print_done("Installation complete!")
        print(f"node_exporter is running on port {port}")
        print(f"Scrape URL: http://{primary_ip()}:{port}/metrics")
    else:
        print_warning("✗ metrics endpoint is not responding")
        print_warning(f"Check the service status: systemctl status {ctx.service_name}")

    name = ctx.service_name
    print_section("Common commands:")
    print(f"Status:  systemctl status {name}")
    print(f"Logs:    journalctl -u {name} -f")
    print(f"Restart: systemctl restart {name}")
    print(f"Stop:    systemctl stop {name}")
    return healthy


def cleanup(ctx: InstallerContext) -> None:
    print_step("Cleaning up temporary files...")

    if ctx.keep_files or (not ctx.auto and not prompt_yes_no("Delete downloaded temporary files?", "y")):
        print_info(f"Temporary files kept in {ctx.extract_path}")
        return

    remove_path(ctx.extract_path)
    remove_path(ctx.tarball_path)
    print_info("Temporary files removed")
