"""Tests for CLI commands."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from sharedrop.cli import _setup_logging, app


runner = CliRunner()


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("sharedrop.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("sharedrop.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestServeCommand:
    """Tests for the serve command."""

    @patch("uvicorn.run")
    def test_serve_starts_uvicorn(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Builds the app and hands it to uvicorn."""
        share = tmp_path / "share"
        result = runner.invoke(app, ["serve", "--dir", str(share), "--port", "9999", "--quiet"])

        assert result.exit_code == 0, result.output
        assert share.is_dir()
        mock_run.assert_called_once()
        kwargs = mock_run.call_args[1]
        assert kwargs["port"] == 9999
        assert kwargs["ssl_certfile"] is None

    @patch("uvicorn.run")
    def test_serve_with_tls(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Certificate and key are forwarded."""
        result = runner.invoke(
            app,
            [
                "serve",
                "--dir",
                str(tmp_path),
                "--cert",
                "cert.pem",
                "--key",
                "key.pem",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "https://" in result.stdout
        assert mock_run.call_args[1]["ssl_keyfile"] == "key.pem"

    @patch("uvicorn.run")
    def test_serve_rejects_partial_auth(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """User without password is a usage error."""
        result = runner.invoke(app, ["serve", "--dir", str(tmp_path), "--user", "admin"])
        assert result.exit_code != 0
        mock_run.assert_not_called()


class TestSearchCommand:
    """Tests for the search command."""

    def test_search_prints_matches(self, tmp_path: Path) -> None:
        """Shows matching lines."""
        target = tmp_path / "file.txt"
        target.write_text("one\ntwo\nthree two\n")

        result = runner.invoke(app, ["search", str(target), "two"])

        assert result.exit_code == 0
        assert "three two" in result.stdout

    def test_search_no_matches(self, tmp_path: Path) -> None:
        """Reports an empty result."""
        target = tmp_path / "file.txt"
        target.write_text("one\n")

        result = runner.invoke(app, ["search", str(target), "zzz"])

        assert result.exit_code == 0
        assert "No matches found" in result.stdout

    def test_search_missing_file(self, tmp_path: Path) -> None:
        """Missing files exit with an error."""
        result = runner.invoke(app, ["search", str(tmp_path / "missing"), "x"])
        assert result.exit_code == 1


class TestZipCommand:
    """Tests for the zip command."""

    def test_zip_writes_archive(self, tmp_path: Path) -> None:
        """Writes the archive to the requested location."""
        source = tmp_path / "src"
        source.mkdir()
        (source / "a.txt").write_text("a")
        (source / ".h").write_text("h")
        output = tmp_path / "out" / "a.zip"

        result = runner.invoke(app, ["zip", str(source), str(output), "--no-hidden"])

        assert result.exit_code == 0
        with zipfile.ZipFile(output) as zf:
            assert zf.namelist() == ["a.txt"]

    def test_zip_missing_directory(self, tmp_path: Path) -> None:
        """Missing directories exit with an error."""
        result = runner.invoke(app, ["zip", str(tmp_path / "nope"), str(tmp_path / "o.zip")])
        assert result.exit_code == 1
