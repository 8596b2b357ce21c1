"""Tests for app wiring and the click commands."""

from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from orpheus.cli import OrpheusApp, build_sources, cli, console as cli_console
from orpheus.config import CatalogSettings, Settings
from orpheus.errors import StartupFatal
from orpheus.messages import FinalAnswer
from orpheus.providers.base import ProviderConfig
from orpheus.sources import LocalCommandSource, RemoteCatalogSource
from orpheus.sources.local import GCLOUD_TOOL, LINUX_TOOL

from conftest import ScriptedProvider


def _settings(tmp_path, catalog=True, document=None):
    doc = tmp_path / "config.yml"
    doc.write_text("service: api\nhealth: /healthz\n")
    return Settings(
        provider="gemini",
        provider_config=ProviderConfig(api_key="", model="gemini-2.5-flash"),
        catalog=CatalogSettings("github", "https://mcp.invalid/") if catalog else None,
        config_document=document or str(doc),
    )


def _refusing_remote():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)
    return RemoteCatalogSource("github", "https://mcp.invalid/", transport=httpx.MockTransport(refuse))


def _quiet_local():
    return LocalCommandSource(echo=lambda _cmd: None)


class TestOrpheusApp:
    def test_build_sources_remote_first(self, tmp_path):
        sources = build_sources(_settings(tmp_path))
        assert [s.name for s in sources] == ["remote:github", "local"]

    def test_build_sources_without_catalog(self, tmp_path):
        sources = build_sources(_settings(tmp_path, catalog=False))
        assert [s.name for s in sources] == ["local"]

    def test_remote_failure_leaves_local_tools_in_directive(self, tmp_path):
        app = OrpheusApp(_settings(tmp_path), sources=[_refusing_remote(), _quiet_local()])

        assert list(app.tools) == [GCLOUD_TOOL, LINUX_TOOL]
        assert len(app.tools.unavailable) == 1
        tool_lines = [
            line for line in app.directive.splitlines()
            if line.startswith("- ") and "Use this tool" in line
        ]
        assert [line.split(":")[0][2:] for line in tool_lines] == [GCLOUD_TOOL, LINUX_TOOL]
        assert app.directive.endswith("service: api\nhealth: /healthz\n")

    def test_missing_config_document_is_fatal(self, tmp_path):
        settings = _settings(tmp_path, document=str(tmp_path / "nope.yml"))
        with pytest.raises(StartupFatal):
            OrpheusApp(settings, sources=[_quiet_local()])

    def test_each_engine_has_own_history(self, tmp_path):
        provider = ScriptedProvider([FinalAnswer("a")])
        app = OrpheusApp(_settings(tmp_path), sources=[_quiet_local()], provider=provider)
        first, second = app.new_engine(), app.new_engine()
        first.run_turn("hello")
        assert len(first.history) == 2
        assert second.history == ()
        assert first.directive == second.directive


def _write_config(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(
        "catalog:\n  enabled: false\n"
        f"session:\n  config_document: {tmp_path / 'ops.yml'}\n"
    )
    (tmp_path / "ops.yml").write_text("deploy: cloud-run\n")
    return str(config)


class TestCommands:
    def test_directive_command(self, tmp_path):
        result = CliRunner().invoke(cli, ["--config", _write_config(tmp_path), "directive"])
        assert result.exit_code == 0, result.output
        assert "AVAILABLE TOOLS:" in result.output
        assert GCLOUD_TOOL in result.output
        assert "deploy: cloud-run" in result.output

    def test_tools_command(self, tmp_path):
        result = CliRunner().invoke(cli, ["--config", _write_config(tmp_path), "tools"])
        assert result.exit_code == 0, result.output
        assert LINUX_TOOL in result.output

    def test_missing_document_exits_with_error(self, tmp_path):
        config = _write_config(tmp_path)
        result = CliRunner().invoke(
            cli, ["--config", config, "directive", "--document", str(tmp_path / "gone.yml")],
        )
        assert result.exit_code == 1
        assert "Failed to read config file" in result.output

    def test_chat_command_ends_on_sentinel(self, tmp_path):
        provider = ScriptedProvider([FinalAnswer("Hi, I am Orpheus.")])
        with patch("orpheus.cli.create_provider", return_value=provider):
            result = CliRunner().invoke(
                cli, ["--config", _write_config(tmp_path), "chat"], input="hello\nEND\n",
            )
        assert result.exit_code == 0, result.output
        assert len(provider.calls) == 1
        assert provider.calls[0]["messages"][0].text == "hello"

    def test_config_command(self, tmp_path):
        result = CliRunner().invoke(cli, ["--config", _write_config(tmp_path), "config"])
        assert result.exit_code == 0, result.output
        assert "Tool catalog: disabled" in result.output

    def test_unknown_provider_still_closes_app(self, tmp_path):
        config = _write_config(tmp_path)
        with patch.object(OrpheusApp, "close", autospec=True) as close:
            result = CliRunner().invoke(cli, ["--config", config, "chat", "--provider", "nope"])
        assert result.exit_code == 1
        assert "Provider 'nope' not found" in result.output
        close.assert_called_once()

    def test_tools_command_closes_app_when_output_fails(self, tmp_path):
        config = _write_config(tmp_path)
        with patch.object(cli_console, "print", side_effect=RuntimeError("terminal gone")), \
                patch.object(OrpheusApp, "close", autospec=True) as close:
            result = CliRunner().invoke(cli, ["--config", config, "tools"])
        assert isinstance(result.exception, RuntimeError)
        close.assert_called_once()
