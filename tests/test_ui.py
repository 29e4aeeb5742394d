"""Tier 1: Tests for TTY prompt helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from node_exporter_installer.ui import prompt_input, prompt_yes_no


class TestPromptYesNo:
    def test_empty_takes_default_no(self) -> None:
        with patch("node_exporter_installer.ui._tty_input", return_value=""):
            assert prompt_yes_no("Download it again?", "n") is False

    def test_empty_takes_default_yes(self) -> None:
        with patch("node_exporter_installer.ui._tty_input", return_value=""):
            assert prompt_yes_no("Delete files?", "y") is True

    def test_uppercase_y(self) -> None:
        with patch("node_exporter_installer.ui._tty_input", return_value="Y"):
            assert prompt_yes_no("Download it again?", "n") is True

    def test_explicit_no_overrides_default(self) -> None:
        with patch("node_exporter_installer.ui._tty_input", return_value="n"):
            assert prompt_yes_no("Delete files?", "y") is False

    def test_suffix_shows_default(self) -> None:
        with patch("node_exporter_installer.ui._tty_input", return_value="") as tty:
            prompt_yes_no("Delete files?", "y")
        assert tty.call_args[0][0] == "Delete files? (Y/n): "


class TestPromptInput:
    def test_default_used(self) -> None:
        with patch("node_exporter_installer.ui._tty_input", return_value="  "):
            assert prompt_input("Username", "node_exporter") == "node_exporter"

    def test_value_stripped(self) -> None:
        with patch("node_exporter_installer.ui._tty_input", return_value=" prom \n"):
            assert prompt_input("Username") == "prom"


class TestTtyFallback:
    def test_reads_stdin_without_tty(self, monkeypatch, capsys) -> None:
        import io
        import sys

        def no_tty(*args, **kwargs):
            raise OSError("no controlling terminal")

        monkeypatch.setattr("node_exporter_installer.ui.open", no_tty, raising=False)
        monkeypatch.setattr(sys, "stdin", io.StringIO("3\n"))
        assert prompt_input("Choose [1-3]") == "3"
        assert "Choose [1-3]: " in capsys.readouterr().err

    def test_closed_stdin_raises_eof(self, monkeypatch) -> None:
        import io
        import sys

        def no_tty(*args, **kwargs):
            raise OSError("no controlling terminal")

        monkeypatch.setattr("node_exporter_installer.ui.open", no_tty, raising=False)
        monkeypatch.setattr(sys, "stdin", io.StringIO(""))
        with pytest.raises(EOFError):
            prompt_input("Username")
