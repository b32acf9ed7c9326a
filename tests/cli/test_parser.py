"""
Tests for the zig-update command line.
"""

import logging

import pytest
import responses

from tests.fixtures.archives import build_archive, standard_entries
from tests.fixtures.releases import INDEX_URL
from zigupdate.cli.parser import (
    CLI,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
)

MASTER_LINUX = "https://ziglang.org/builds/zig-linux-x86_64-0.12.0-dev.tar.xz"
RELEASE_LINUX = "https://ziglang.org/download/0.11.0/zig-linux-x86_64-0.11.0.tar.xz"


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the root logger changes made by CLI.run."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _run(*argv):
    return CLI().run(["--index-url", INDEX_URL, *argv])


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_creation(self):
        """Test CLI can be created."""
        cli = CLI()
        assert cli.parser is not None
        assert cli.parser.prog == "zig-update"

    def test_version_flag(self, capsys):
        """Test -v prints build info and exits without network access."""
        result = CLI().run(["-v"])

        assert result == EXIT_OK
        captured = capsys.readouterr()
        assert captured.out.startswith("zig-update ")
        assert "(rev: " in captured.out

    def test_version_flag_ignores_targets(self, capsys):
        """Test -v wins over positional arguments."""
        assert CLI().run(["-v", "x86_64-linux", "/tmp/zig"]) == EXIT_OK

    def test_unknown_option(self, capsys):
        """Test argparse rejects unknown options."""
        with pytest.raises(SystemExit) as exc_info:
            CLI().run(["--bogus"])

        assert exc_info.value.code == 2

    def test_parse_options(self):
        """Test option destinations."""
        args = CLI().parser.parse_args(
            ["-d", "0.11.0", "-q", "--config", "c.yaml", "x86_64-linux", "out"]
        )

        assert args.download_version == "0.11.0"
        assert args.quiet is True
        assert str(args.config) == "c.yaml"
        assert args.targets == ["x86_64-linux", "out"]


class TestUsage:
    """Usage output lists what the index offers."""

    @responses.activate
    def test_no_arguments_lists_platforms_and_versions(self, capsys, sample_index_data):
        """Test that missing targets print usage and exit 2."""
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)

        result = _run()

        assert result == EXIT_USAGE
        err = capsys.readouterr().err
        assert "usage: zig-update [options] PLATFORM DEST" in err
        assert "Arch (master):" in err
        assert "  aarch64-macos\n  x86_64-linux\n  x86_64-windows" in err
        assert "Version:\n  0.9.1\n  0.10.0\n  0.11.0\n  master" in err
        assert "stdDocs" not in err

    @responses.activate
    def test_one_argument_is_usage(self, capsys, sample_index_data):
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)

        assert _run("x86_64-linux") == EXIT_USAGE

    @responses.activate
    def test_usage_for_selected_version(self, capsys, sample_index_data):
        """Test that -d selects which release's platforms are listed."""
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)

        assert _run("-d", "0.9.1") == EXIT_USAGE

        err = capsys.readouterr().err
        assert "Arch (0.9.1):\n  x86_64-linux\nVersion:" in err

    @responses.activate
    def test_usage_with_unknown_version_falls_back(self, capsys, sample_index_data):
        """Test that an unknown -d warns and lists master platforms."""
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)

        assert _run("-d", "0.8.0") == EXIT_USAGE

        err = capsys.readouterr().err
        assert "WARNING: Zig version not found in index: 0.8.0" in err
        assert "Arch (master):" in err

    @responses.activate
    def test_usage_index_failure(self, capsys):
        """Test that usage still reports index errors."""
        responses.add(responses.GET, INDEX_URL, status=503)

        assert _run() == EXIT_ERROR
        assert "ERROR: Request to" in capsys.readouterr().err


class TestInstallCommand:
    """End-to-end runs against mocked downloads."""

    @responses.activate
    def test_install_master(self, capsys, tmp_path, sample_index_data):
        """Test a successful install exits 0."""
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)
        responses.add(
            responses.GET,
            MASTER_LINUX,
            body=build_archive("tar.xz", standard_entries()),
        )
        dest = tmp_path / "zig"

        result = _run("x86_64-linux", str(dest))

        assert result == EXIT_OK
        assert (dest / "a" / "b.txt").read_bytes() == b"hello zig\n"

    @responses.activate
    def test_install_selected_version(self, capsys, tmp_path, sample_index_data):
        """Test -d downloads the selected release instead of master."""
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)
        responses.add(
            responses.GET,
            RELEASE_LINUX,
            body=build_archive("tar.xz", standard_entries()),
        )

        result = _run("-d", "0.11.0", "x86_64-linux", str(tmp_path / "zig"))

        assert result == EXIT_OK
        assert responses.calls[-1].request.url == RELEASE_LINUX

    @responses.activate
    def test_unknown_version_error(self, capsys, tmp_path, sample_index_data):
        """Test an unknown -d version exits 1 with an error line."""
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)

        result = _run("-d", "0.8.0", "x86_64-linux", str(tmp_path / "zig"))

        assert result == EXIT_ERROR
        err = capsys.readouterr().err
        assert "ERROR: Zig version not found in index: 0.8.0" in err

    @responses.activate
    def test_unknown_platform_error(self, capsys, tmp_path, sample_index_data):
        responses.add(responses.GET, INDEX_URL, json=sample_index_data)

        result = _run("mips-plan9", str(tmp_path / "zig"))

        assert result == EXIT_ERROR
        assert "ERROR: Unsupported platform: mips-plan9" in capsys.readouterr().err

    def test_missing_config_file(self, capsys, tmp_path):
        """Test a missing --config file exits 1."""
        result = CLI().run(["--config", str(tmp_path / "nope.yaml"), "a", "b"])

        assert result == EXIT_ERROR
        assert "Configuration file not found" in capsys.readouterr().err

    @responses.activate
    def test_index_url_from_config_file(self, capsys, tmp_path, sample_index_data):
        """Test the index URL can come from the config file."""
        mirror = "https://mirror.example.com/index.json"
        config_file = tmp_path / "zig-update.yaml"
        config_file.write_text(f"index_url: {mirror}\n")
        responses.add(responses.GET, mirror, json=sample_index_data)

        result = CLI().run(["--config", str(config_file)])

        assert result == EXIT_USAGE
        assert responses.calls[0].request.url == mirror

    def test_keyboard_interrupt(self, monkeypatch):
        """Test Ctrl-C exits 130."""

        def interrupt(self, args):
            raise KeyboardInterrupt

        monkeypatch.setattr(CLI, "_run_install", interrupt)

        assert CLI().run(["x86_64-linux", "zig"]) == EXIT_INTERRUPTED
