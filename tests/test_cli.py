"""Tests for the imgbatch command line"""
from typing import NoReturn, get_type_hints
from unittest.mock import MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from imgbatch.cli import _fail, app
from imgbatch.errors import EngineError
from conftest import messages


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(temp_dir, monkeypatch):
    """Run every command away from any real config file"""
    monkeypatch.chdir(temp_dir)
    monkeypatch.delenv("IMGBATCH_DOCKER_URL", raising=False)
    with patch("imgbatch.config.GLOBAL_CONFIG_PATH", temp_dir / "missing.yaml"):
        yield


@pytest.fixture
def mock_connect():
    """Patch engine creation with a fake engine that builds successfully"""
    engine = MagicMock()
    engine.build.side_effect = lambda path, tags: messages(" ---> 1111aaaa2222\n", " ---> 3333bbbb4444\n")
    engine.push.side_effect = lambda tag: messages("", key="status")
    engine.inspect.return_value = {"Size": 2048, "Architecture": "amd64", "Os": "linux"}
    with patch("imgbatch.cli.EngineClient.connect", return_value=engine) as connect:
        yield connect


class TestArguments:
    """Test argument validation"""

    def test_missing_files(self, mock_connect):
        result = runner.invoke(app, ["-registry", "registry.example.com"])
        assert result.exit_code == 1
        assert "Both files and registry are required" in result.output
        mock_connect.assert_not_called()

    def test_missing_registry(self, mock_connect):
        result = runner.invoke(app, ["-files", "a/Dockerfile"])
        assert result.exit_code == 1
        mock_connect.assert_not_called()

    def test_partial_credentials(self, mock_connect):
        """Test a partial credential triple exits before any engine call"""
        result = runner.invoke(app, ["-files", "a/Dockerfile", "-registry", "r.example.com", "-username", "ci"])
        assert result.exit_code == 1
        assert "Username, password, and email are required together" in result.output
        mock_connect.assert_not_called()

    def test_missing_config_file(self, mock_connect, temp_dir):
        result = runner.invoke(app, ["--config", str(temp_dir / "nope.yaml"), "--files", "Dockerfile"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestRun:
    """Test full runs against a fake engine"""

    def test_two_dockerfiles(self, mock_connect, make_dockerfile):
        make_dockerfile("a", "# repo/a:1\n\nFROM alpine\n")
        make_dockerfile("b", "# repo/b:1\n\nFROM alpine\n")

        result = runner.invoke(app, [
            "-files", "a/Dockerfile,b/Dockerfile",
            "-registry", "registry.example.com",
            "-username", "ci", "-password", "secret", "-email", "ci@example.com",
            "-version", "1.30",
        ])

        assert result.exit_code == 0, result.output
        auth = mock_connect.call_args.args[0]
        assert auth.username == "ci"
        assert mock_connect.call_args.kwargs["version"] == "1.30"

        output = result.output
        assert "#################### Success:" in output
        summary = output[output.index("#################### Success:"):]
        assert summary.index("a/Dockerfile") < summary.index("b/Dockerfile")
        assert summary.count("Id: 3333bbbb4444") == 2
        assert "Finished in:" in output

        engine = mock_connect.return_value
        assert engine.remove.call_count == 2
        engine.close.assert_called_once()

    def test_no_cleanup(self, mock_connect, make_dockerfile):
        make_dockerfile("a", "# repo/a:1\n\nFROM alpine\n")
        result = runner.invoke(app, ["--files", "a/Dockerfile", "--registry", "r.example.com", "-no-cleanup"])
        assert result.exit_code == 0, result.output
        mock_connect.return_value.remove.assert_not_called()

    def test_build_failure_exits_non_zero(self, mock_connect, make_dockerfile):
        make_dockerfile("a", "# repo/a:1\n\nFROM alpine\n")
        mock_connect.return_value.build.side_effect = EngineError("daemon unreachable")

        result = runner.invoke(app, ["-files", "a/Dockerfile", "-registry", "r.example.com"])

        assert result.exit_code == 1
        assert "***** ERROR *****" in result.output
        assert "daemon unreachable" in result.output
        assert "Success" not in result.output

    def test_unreadable_dockerfile_reports_error(self, mock_connect, temp_dir):
        """Test a Dockerfile that is not UTF-8 ends in the error banner, not a traceback"""
        (temp_dir / "a").mkdir()
        (temp_dir / "a" / "Dockerfile").write_bytes(b"# repo/\xff\xfe:1\n\nFROM alpine\n")

        result = runner.invoke(app, ["-files", "a/Dockerfile", "-registry", "r.example.com"])

        assert result.exit_code == 1
        assert "***** ERROR *****" in result.output
        mock_connect.return_value.build.assert_not_called()

    def test_client_creation_failure(self, mock_connect, make_dockerfile):
        mock_connect.side_effect = EngineError("bad version")
        result = runner.invoke(app, ["-files", "a/Dockerfile", "-registry", "r.example.com"])
        assert result.exit_code == 1
        assert "Failed to create Docker client" in result.output

    def test_registry_from_config_file(self, mock_connect, make_dockerfile, temp_dir):
        make_dockerfile("a", "# repo/a:1\n\nFROM alpine\n")
        (temp_dir / ".imgbatch.yaml").write_text("registry: registry.example.com\ncleanup: false\n")

        result = runner.invoke(app, ["-files", "a/Dockerfile"])

        assert result.exit_code == 0, result.output
        assert mock_connect.call_args.args[0].server_address == "registry.example.com"
        mock_connect.return_value.remove.assert_not_called()


class TestHelp:
    """Test the help text"""

    def test_cleanup_help_mentions_go_spelling(self):
        result = runner.invoke(app, ["--help"], env={"COLUMNS": "250", "TERMINAL_WIDTH": "250"})
        assert result.exit_code == 0
        assert "-cleanup=false" in result.output


class TestFail:
    """Test the error exit helper"""

    def test_fail_exits_with_banner(self, capsys):
        with pytest.raises(typer.Exit) as exc:
            _fail("Failed to create Docker client", EngineError("bad version"))
        assert exc.value.exit_code == 1
        assert "***** ERROR *****" in capsys.readouterr().out

    def test_fail_never_returns(self):
        assert get_type_hints(_fail)["return"] is NoReturn
