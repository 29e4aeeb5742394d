"""Shared fixtures, pytest markers, and env-var-based skip logic."""

import os

import pytest

from node_exporter_installer import InstallerContext


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "network: needs internet access (skip with NEI_SKIP_NETWORK=1)"
    )
    config.addinivalue_line(
        "markers", "system: needs root/Linux (auto-skipped when not root, or NEI_SKIP_SYSTEM=1)"
    )
    config.addinivalue_line(
        "markers", "e2e: installs a real service (NEI_TEST_E2E=1)"
    )


def pytest_collection_modifyitems(config, items):
    # network and system run by default; set SKIP vars to disable
    # e2e is opt-in; set NEI_TEST_E2E=1 to enable
    for item in items:
        if "network" in item.keywords and os.environ.get("NEI_SKIP_NETWORK"):
            item.add_marker(
                pytest.mark.skip(reason="NEI_SKIP_NETWORK is set")
            )
        if "system" in item.keywords:
            if os.environ.get("NEI_SKIP_SYSTEM"):
                item.add_marker(
                    pytest.mark.skip(reason="NEI_SKIP_SYSTEM is set")
                )
            elif os.geteuid() != 0:
                item.add_marker(
                    pytest.mark.skip(reason="system tests require root")
                )
        if "e2e" in item.keywords and not os.environ.get("NEI_TEST_E2E"):
            item.add_marker(
                pytest.mark.skip(reason="Set NEI_TEST_E2E=1 to run")
            )


@pytest.fixture()
def ctx(tmp_path):
    """Context pointing every path at tmp_path, with waits disabled."""
    return InstallerContext(
        version="1.9.1",
        arch="amd64",
        download_dir=str(tmp_path / "dl"),
        bin_dir=str(tmp_path / "bin"),
        unit_dir=str(tmp_path / "systemd"),
        startup_wait=0,
        verify_wait=0,
    )
