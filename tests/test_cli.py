"""
Tests for the assets-manager command line.
"""

from unittest.mock import patch

from click.testing import CliRunner

from assets_manager import __version__
from assets_manager.asgi import AssetsMiddleware
from assets_manager.cli import cli

from tests.conftest import ASSETS_DIR


class TestResolve:

    def test_found(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["resolve", "/test.js", "-p", str(ASSETS_DIR)])
        assert result.exit_code == 0
        assert str(ASSETS_DIR / "test.js") in result.output
        assert "application/javascript" in result.output

    def test_first_path_wins(self, search_a, search_b):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["resolve", "/shared.txt", "-p", str(search_b), "-p", str(search_a)]
        )
        assert result.exit_code == 0
        assert str(search_b / "shared.txt") in result.output

    def test_missing(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["resolve", "/missing.txt", "-p", str(ASSETS_DIR)])
        assert result.exit_code == 1
        assert "/missing.txt not found" in result.output

    def test_paths_from_config_file(self, tmp_path):
        cfg = tmp_path / "assets.yaml"
        cfg.write_text(f"assets:\n  paths: {ASSETS_DIR}\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(cfg), "resolve", "/test.js"])
        assert result.exit_code == 0
        assert "application/javascript" in result.output

    def test_bad_config_file(self, tmp_path):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("assets: [unclosed\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(cfg), "resolve", "/test.js"])
        assert result.exit_code == 2
        assert "is invalid" in result.output

    def test_never_writes_into_web_dir(self, tmp_path, web_dir):
        cfg = tmp_path / "assets.yaml"
        cfg.write_text(f"assets:\n  paths: {ASSETS_DIR}\n  web_dir: {web_dir}\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(cfg), "resolve", "/test.js"])
        assert result.exit_code == 0
        assert list(web_dir.iterdir()) == []

    def test_rejects_web_dir_option(self, web_dir):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["resolve", "/test.js", "-p", str(ASSETS_DIR), "--web-dir", str(web_dir)]
        )
        assert result.exit_code == 2
        assert "No such option" in result.output


class TestWarm:

    def test_copies_into_web_dir(self, search_a, web_dir):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["warm", "/sub/test.css", "/shared.txt", "-p", str(search_a), "--web-dir", str(web_dir)],
        )
        assert result.exit_code == 0
        assert (web_dir / "sub" / "test.css").read_bytes() == b"body { color: red; }"
        assert (web_dir / "shared.txt").read_bytes() == b"from a"

    def test_reports_missing(self, search_a, web_dir):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["warm", "/shared.txt", "/missing.txt", "-p", str(search_a), "--web-dir", str(web_dir)],
        )
        assert result.exit_code == 1
        assert (web_dir / "shared.txt").exists()
        assert "/missing.txt not found" in result.output

    def test_requires_web_dir(self, search_a, tmp_path):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["warm", "/shared.txt", "-p", str(search_a), "--web-dir", str(tmp_path / "nope")]
        )
        assert result.exit_code == 1
        assert "No usable web directory" in result.output


class TestServe:

    def test_runs_uvicorn(self, search_a):
        runner = CliRunner()
        with patch("uvicorn.run") as run:
            result = runner.invoke(cli, ["serve", "-p", str(search_a), "--port", "8123"])
        assert result.exit_code == 0
        args, kwargs = run.call_args
        assert isinstance(args[0], AssetsMiddleware)
        assert args[0].manager.paths == (search_a,)
        assert kwargs["port"] == 8123
        assert kwargs["host"] == "127.0.0.1"


def test_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
