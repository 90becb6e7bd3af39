"""
Tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest
import redis
from click.testing import CliRunner

from redis_pubsub_stream.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def no_default_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch("redis_pubsub_stream.config.loader.DEFAULT_CONFIG_PATHS", []):
        yield


@pytest.mark.usefixtures("no_default_config")
class TestPublishCommand:
    def test_publishes_each_line(self, runner):
        records = [{"id": 1}, {"id": 2}]
        stdin = "\n".join(json.dumps(r) for r in records) + "\n\n"

        with patch("redis.Redis") as mock_redis:
            result = runner.invoke(main, ["publish", "--channel", "orders"], input=stdin)

        assert result.exit_code == 0, result.output
        client = mock_redis.return_value
        assert [c.args for c in client.publish.call_args_list] == [
            ("orders", '{"id":1}'),
            ("orders", '{"id":2}'),
        ]
        client.close.assert_called_once()
        assert "Records published: 2" in result.output

    def test_host_and_port_options(self, runner):
        with patch("redis.Redis") as mock_redis:
            result = runner.invoke(
                main,
                ["publish", "--host", "redis.local", "--port", "6380"],
                input='{"a":1}\n',
            )
        assert result.exit_code == 0, result.output
        kwargs = mock_redis.call_args.kwargs
        assert (kwargs["host"], kwargs["port"]) == ("redis.local", 6380)

    def test_reads_input_file(self, runner, tmp_path):
        path = tmp_path / "orders.ndjson"
        path.write_text('{"id":1}\n"two"\n')
        with patch("redis.Redis") as mock_redis:
            result = runner.invoke(main, ["publish", str(path)])
        assert result.exit_code == 0, result.output
        assert mock_redis.return_value.publish.call_count == 2

    def test_invalid_json_line_aborts(self, runner):
        with patch("redis.Redis") as mock_redis:
            result = runner.invoke(main, ["publish"], input='{"id":1}\nnot json\n')
        assert result.exit_code == 1
        assert "Invalid JSON on line 2" in result.output
        assert mock_redis.return_value.publish.call_count == 1
        mock_redis.return_value.close.assert_called_once()

    def test_publish_errors_are_reported_not_raised(self, runner):
        with patch("redis.Redis") as mock_redis:
            mock_redis.return_value.publish.side_effect = redis.ConnectionError("refused")
            result = runner.invoke(main, ["publish"], input='{"id":1}\n')
        assert result.exit_code == 0, result.output
        assert "Publish errors: 1" in result.output

    def test_publish_error_fails_command_when_fail_closed(self, runner, tmp_path):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("stream:\n  fail_open: false\n")
        with patch("redis.Redis") as mock_redis:
            mock_redis.return_value.publish.side_effect = redis.ConnectionError("refused")
            result = runner.invoke(
                main, ["--config", str(config_path), "publish"], input='{"id":1}\n'
            )
        assert result.exit_code == 1
        assert "Error: refused" in result.output
        mock_redis.return_value.close.assert_called_once()

    def test_noop_backend(self, runner):
        with patch("redis.Redis") as mock_redis:
            result = runner.invoke(main, ["publish", "--backend", "noop"], input='{"id":1}\n')
        assert result.exit_code == 0, result.output
        mock_redis.assert_not_called()
        assert "Records published: 1" in result.output

    def test_invalid_port_is_configuration_error(self, runner):
        result = runner.invoke(main, ["publish", "--port", "0"], input="")
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_config_file(self, runner, tmp_path):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("stream:\n  channel: from-file\n  backend: memory\n")
        result = runner.invoke(
            main, ["--config", str(config_path), "publish"], input='{"id":1}\n'
        )
        assert result.exit_code == 0, result.output
        assert "Published to channel 'from-file'" in result.output


@pytest.mark.usefixtures("no_default_config")
class TestValidateConfigCommand:
    def test_valid(self, runner):
        result = runner.invoke(main, ["validate-config"])
        assert result.exit_code == 0
        assert "Configuration is valid." in result.output

    def test_warnings_listed(self, runner, tmp_path):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("stream:\n  channel: orders.*\n")
        result = runner.invoke(main, ["--config", str(config_path), "validate-config"])
        assert result.exit_code == 0
        assert "glob characters" in result.output

    def test_fatal_error(self, runner, tmp_path):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("stream:\n  channel: ' '\n")
        result = runner.invoke(main, ["--config", str(config_path), "validate-config"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_check_connection_failure(self, runner):
        with patch("redis.Redis") as mock_redis:
            mock_redis.return_value.ping.side_effect = redis.ConnectionError("refused")
            result = runner.invoke(main, ["validate-config", "--check-connection"])
        assert result.exit_code == 1
        assert "Redis connection failed" in result.output


@pytest.mark.usefixtures("no_default_config")
def test_show_config(runner):
    result = runner.invoke(main, ["show-config"])
    assert result.exit_code == 0
    assert "channel: Default" in result.output
    assert "server_port: 6379" in result.output


@pytest.mark.usefixtures("no_default_config")
class TestLoggingSetup:
    @pytest.fixture
    def logging_config(self, tmp_path):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("logging:\n  level: warning\n  json_output: true\n")
        return config_path

    def test_defaults(self, runner):
        with patch("redis_pubsub_stream.cli.configure_logging") as mock_configure:
            result = runner.invoke(main, ["show-config"])
        assert result.exit_code == 0
        mock_configure.assert_called_once_with(level="INFO", json_output=False)

    def test_logging_section_is_applied(self, runner, logging_config):
        with patch("redis_pubsub_stream.cli.configure_logging") as mock_configure:
            result = runner.invoke(main, ["--config", str(logging_config), "show-config"])
        assert result.exit_code == 0
        mock_configure.assert_called_once_with(level="WARNING", json_output=True)

    def test_verbose_overrides_level(self, runner, logging_config):
        with patch("redis_pubsub_stream.cli.configure_logging") as mock_configure:
            runner.invoke(main, ["--config", str(logging_config), "-v", "show-config"])
        mock_configure.assert_called_once_with(level="DEBUG", json_output=True)

    def test_json_logs_flag(self, runner):
        with patch("redis_pubsub_stream.cli.configure_logging") as mock_configure:
            runner.invoke(main, ["--json-logs", "show-config"])
        mock_configure.assert_called_once_with(level="INFO", json_output=True)

    def test_invalid_logging_section(self, runner, tmp_path):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("logging:\n  level: chatty\n")
        result = runner.invoke(main, ["--config", str(config_path), "show-config"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
