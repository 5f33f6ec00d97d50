"""
Unit tests for the command-line interface.
"""

import json

import pytest

from llcm import __version__
from llcm.cli import build_parser, main
from llcm.connectors.factory import LogsClientFactory
from llcm.errors import ProviderError
from tests.utils.mock_logs import MockLogsClient, make_log_group


@pytest.fixture
def mock_client(monkeypatch, tmp_path):
    for name in ["AWS_PROFILE", "LLCM_LOG_LEVEL", "LLCM_OUTPUT_TYPE", "LLCM_NUM_WORKERS",
                 "LLCM_MAX_RETRY_ATTEMPTS", "LLCM_DELAY_TIME_SEC"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LLCM_CLIENT_TYPE", "memory")

    client = MockLogsClient(pages={
        "us-east-1": [[
            make_log_group("small", stored_bytes=100, retention_in_days=90),
            make_log_group("big", stored_bytes=900, retention_in_days=90),
        ]],
        "eu-west-1": [[make_log_group("eu", stored_bytes=500, region="eu-west-1")]],
    })
    LogsClientFactory.register_client("memory", lambda settings: client)
    yield client
    LogsClientFactory.unregister_client("memory")


class TestParser:
    """Test cases for argument parsing."""

    def test_repeatable_flags(self):
        args = build_parser().parse_args(["list", "-r", "us-east-1", "-r", "eu-west-1", "-f", "bytes > 1", "-o", "tsv"])

        assert args.command == "list"
        assert args.region == ["us-east-1", "eu-west-1"]
        assert args.filter == ["bytes > 1"]
        assert args.output == "tsv"

    def test_preview_requires_desired(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["preview"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 1


class TestCommands:
    """Test cases for subcommands against an in-memory client."""

    def test_list_json_sorted(self, mock_client, capsys):
        assert main(["list", "-r", "us-east-1", "-r", "eu-west-1", "-o", "json"]) == 0

        captured = capsys.readouterr()
        names = [r["LogGroupName"] for r in json.loads(captured.out)]
        assert names == ["big", "eu", "small"]
        assert "stopped" in captured.err
        assert "storedBytes=1,500" in captured.err
        assert mock_client.closed

    def test_list_uses_output_env(self, mock_client, capsys, monkeypatch):
        monkeypatch.setenv("LLCM_OUTPUT_TYPE", "tsv")

        assert main(["list", "-r", "us-east-1"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Name\tRegion")
        assert len(lines) == 3

    def test_preview_with_filter(self, mock_client, capsys):
        assert main(["preview", "-r", "us-east-1", "-d", "1month", "-f", "name == big", "-o", "json"]) == 0

        records = json.loads(capsys.readouterr().out)
        assert len(records) == 1
        assert records[0]["ReducibleBytes"] == 600
        assert records[0]["RemainingBytes"] == 300

    def test_list_chart(self, mock_client, capsys, monkeypatch, tmp_path):
        opened = []
        monkeypatch.setattr("llcm.rendering.chart.webbrowser.open", opened.append)

        assert main(["list", "-r", "us-east-1", "-o", "chart"]) == 0

        assert capsys.readouterr().out == ""
        assert (tmp_path / "llcm.html").exists()
        assert opened == [(tmp_path / "llcm.html").resolve().as_uri()]

    def test_config_with_unsupported_region(self, mock_client, capsys, tmp_path):
        config_file = tmp_path / "llcm.yaml"
        config_file.write_text("regions:\n  - mars-north-1\n")

        assert main(["list", "--config", str(config_file)]) == 1

        assert "unsupported region" in capsys.readouterr().err
        assert mock_client.calls == []

    def test_apply_writes_lines(self, mock_client, capsys):
        assert main(["apply", "-r", "us-east-1", "-d", "infinite"]) == 0

        out = capsys.readouterr().out
        assert sorted(out.splitlines()) == ["deleted retention policy: big", "deleted retention policy: small"]

    def test_apply_failure_exits_non_zero(self, mock_client, capsys):
        mock_client.fail("delete_log_group", "big", ProviderError("AccessDeniedException"))

        assert main(["apply", "-r", "us-east-1", "-d", "delete", "-f", "name == big"]) == 1

        captured = capsys.readouterr()
        assert "AccessDeniedException" in captured.err
        assert "applied=0" in captured.err

    @pytest.mark.parametrize("argv,message", [
        (["list", "-r", "mars-north-1"], "unsupported region"),
        (["list", "-o", "pie"], "unsupported output type"),
        (["list", "-f", "size > 1"], "unknown filter key"),
        (["preview", "-d", "forever"], "unsupported desired state"),
        (["apply", "-d", "none"], "unsupported desired state"),
    ])
    def test_invalid_arguments(self, mock_client, capsys, argv, message):
        assert main(argv) == 1
        assert message in capsys.readouterr().err

    def test_bad_log_level(self, mock_client, capsys):
        assert main(["list", "-l", "trace"]) == 1
        assert "unsupported log level" in capsys.readouterr().err

    def test_missing_config_file(self, mock_client, capsys, tmp_path):
        assert main(["list", "--config", str(tmp_path / "missing.yaml")]) == 1
        assert "not found" in capsys.readouterr().err


class TestCompletion:
    """Test cases for the completion subcommand."""

    @pytest.mark.parametrize("shell,marker", [
        ("bash", "complete -F _llcm llcm"),
        ("zsh", "#compdef llcm"),
        ("pwsh", "Register-ArgumentCompleter"),
    ])
    def test_scripts(self, capsys, shell, marker):
        assert main(["completion", shell]) == 0
        assert marker in capsys.readouterr().out

    def test_unsupported_shell(self, capsys):
        with pytest.raises(SystemExit):
            main(["completion", "fish"])
