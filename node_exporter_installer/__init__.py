"""Prometheus node_exporter installer package."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

__version__ = "1.2.0"

DEFAULT_REPO = "prometheus/node_exporter"
DEFAULT_FALLBACK_VERSION = "1.9.1"


@dataclass
class InstallerContext:
    """Shared state passed between installer stages."""

    repo: str = DEFAULT_REPO
    version: str = ""  # pinned release; empty means discover latest
    fallback_version: str = DEFAULT_FALLBACK_VERSION
    arch: str = ""
    download_dir: str = "/tmp"
    bin_dir: str = "/usr/local/bin"
    unit_dir: str = "/etc/systemd/system"
    service_name: str = "node_exporter"
    svc_user: str = "node_exporter"
    svc_group: str = ""
    listen_port: int = 9100
    extra_args: list[str] = field(default_factory=list)
    startup_wait: float = 3
    verify_wait: float = 2
    auto: bool = False
    keep_files: bool = False
    need_download: bool = True
    need_extract: bool = True

    def __post_init__(self) -> None:
        if not self.svc_group:
            self.svc_group = self.svc_user

    @property
    def filename(self) -> str:
        """Base name of the release asset, also the extracted directory name."""
        return f"node_exporter-{self.version}.linux-{self.arch}"

    @property
    def tarball_path(self) -> str:
        return os.path.join(self.download_dir, f"{self.filename}.tar.gz")

    @property
    def extract_path(self) -> str:
        return os.path.join(self.download_dir, self.filename)

    @property
    def download_url(self) -> str:
        return (
            f"https://github.com/{self.repo}/releases/download/"
            f"v{self.version}/{self.filename}.tar.gz"
        )

    @property
    def bin_path(self) -> str:
        return os.path.join(self.bin_dir, "node_exporter")

    @property
    def unit_path(self) -> str:
        return os.path.join(self.unit_dir, f"{self.service_name}.service")
