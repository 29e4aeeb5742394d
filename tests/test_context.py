"""Tier 1: Tests for InstallerContext."""

from __future__ import annotations

from node_exporter_installer import InstallerContext


class TestInstallerContext:
    def test_default_values(self) -> None:
        ctx = InstallerContext()
        assert ctx.repo == "prometheus/node_exporter"
        assert ctx.version == ""
        assert ctx.fallback_version == "1.9.1"
        assert ctx.download_dir == "/tmp"
        assert ctx.bin_dir == "/usr/local/bin"
        assert ctx.unit_dir == "/etc/systemd/system"
        assert ctx.service_name == "node_exporter"
        assert ctx.svc_user == "node_exporter"
        assert ctx.listen_port == 9100
        assert ctx.extra_args == []
        assert ctx.auto is False
        assert ctx.keep_files is False

    def test_group_defaults_to_user(self) -> None:
        ctx = InstallerContext(svc_user="prom")
        assert ctx.svc_group == "prom"

    def test_explicit_group_kept(self) -> None:
        ctx = InstallerContext(svc_user="prom", svc_group="monitoring")
        assert ctx.svc_group == "monitoring"

    def test_derived_paths(self) -> None:
        ctx = InstallerContext(version="1.8.2", arch="arm64")
        assert ctx.filename == "node_exporter-1.8.2.linux-arm64"
        assert ctx.tarball_path == "/tmp/node_exporter-1.8.2.linux-arm64.tar.gz"
        assert ctx.extract_path == "/tmp/node_exporter-1.8.2.linux-arm64"
        assert ctx.bin_path == "/usr/local/bin/node_exporter"
        assert ctx.unit_path == "/etc/systemd/system/node_exporter.service"

    def test_download_url(self) -> None:
        ctx = InstallerContext(version="1.9.1", arch="amd64")
        assert ctx.download_url == (
            "https://github.com/prometheus/node_exporter/releases/download/"
            "v1.9.1/node_exporter-1.9.1.linux-amd64.tar.gz"
        )

    def test_extra_args_not_shared(self) -> None:
        a = InstallerContext()
        b = InstallerContext()
        a.extra_args.append("--collector.systemd")
        assert b.extra_args == []
