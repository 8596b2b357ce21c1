"""Orpheus CLI - DevOps assistant with remote and local tools."""

import logging
from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from .config import ConfigManager, Settings
from .conversation import ConversationEngine
from .errors import StartupFatal
from .prompts import build_directive, load_config_document
from .providers.base import BaseProvider
from .providers.registry import discover_providers, get_registry
from .repl import ChatSession
from .sources import LocalCommandSource, RemoteCatalogSource, ToolSource
from .tools import ToolRegistry, build_tool_registry
from .ui.output import render_error, render_header, render_tool_result
from .ui.theme import PALETTE, console

_log = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich on stderr."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def build_sources(settings: Settings) -> list[ToolSource]:
    """Remote catalog first, then the local command tools."""
    sources: list[ToolSource] = []
    if settings.catalog is not None:
        sources.append(RemoteCatalogSource(
            settings.catalog.name,
            settings.catalog.base_url,
            token=settings.catalog.token,
            timeout=settings.catalog.timeout,
        ))
    sources.append(LocalCommandSource(timeout=settings.command_timeout))
    return sources


def create_provider(settings: Settings) -> BaseProvider:
    discover_providers()
    provider_classes = get_registry()
    provider_class = provider_classes.get(settings.provider)
    if provider_class is None:
        raise click.ClickException(
            f"Provider '{settings.provider}' not found. "
            f"Available: {sorted(provider_classes)}"
        )
    return provider_class(settings.provider_config)


class OrpheusApp:
    """Startup wiring: settings -> sources -> registry -> directive -> engine."""

    def __init__(
        self,
        settings: Settings,
        sources: Optional[list[ToolSource]] = None,
        provider: Optional[BaseProvider] = None,
    ):
        self.settings = settings
        self.config_text = load_config_document(settings.config_document)
        self.sources = sources if sources is not None else build_sources(settings)
        self.tools: ToolRegistry = build_tool_registry(
            self.sources,
            policy=settings.merge_policy,
        )
        self.directive = build_directive(self.tools, self.config_text)
        self._provider = provider

    @property
    def provider(self) -> BaseProvider:
        if self._provider is None:
            self._provider = create_provider(self.settings)
        return self._provider

    def new_engine(self) -> ConversationEngine:
        """Each session owns its own engine and history."""
        return ConversationEngine(
            self.provider,
            self.tools,
            self.directive,
            max_tool_rounds=self.settings.max_tool_rounds,
            on_tool_result=lambda result: render_tool_result(result.name, result.ok),
        )

    def close(self) -> None:
        """Close network clients held by the provider and remote sources."""
        if self._provider is not None:
            self._provider.close()
        for source in self.sources:
            if isinstance(source, RemoteCatalogSource):
                source.close()


def _load_settings(ctx: click.Context, provider=None, document=None) -> Settings:
    manager = ConfigManager(ctx.obj.get("config_path"))
    return manager.settings(provider=provider, config_document=document)


def _make_app(settings: Settings) -> OrpheusApp:
    try:
        return OrpheusApp(settings)
    except StartupFatal as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """ORPHEUS - DevOps assistant that can run tools for you."""
    configure_logging(verbose)
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)
    else:
        _log.warning("No .env file found; using the current environment")
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--provider", "-p", help="Provider to use (gemini, openai)")
@click.option("--document", "-d", help="Operational config document embedded in the directive")
@click.pass_context
def chat(ctx, provider, document):
    """Start an interactive session."""
    settings = _load_settings(ctx, provider, document)
    app = _make_app(settings)
    try:
        session = ChatSession(app.new_engine(), sentinel=settings.sentinel)
        render_header("ORPHEUS", f"{settings.provider} / {settings.provider_config.model}")
        console.print(
            f"{len(app.tools)} tools available: {', '.join(app.tools)}",
            style=f"dim {PALETTE.text}",
        )
        for diag in app.tools.unavailable:
            render_error(str(diag))
        session.run()
    finally:
        app.close()


@cli.command()
@click.option("--document", "-d", help="Operational config document")
@click.pass_context
def tools(ctx, document):
    """List the tools the assistant can call."""
    app = _make_app(_load_settings(ctx, document=document))
    try:
        console.print(f"\nTools ({len(app.tools)}):\n", style=f"bold {PALETTE.accent}")
        for name, tool in app.tools.items():
            console.print(f"  {name}  [{tool.source}]", style=PALETTE.text_bright, markup=False)
            if tool.description:
                console.print(f"      {tool.description}", style="dim", markup=False)
        for diag in app.tools.unavailable:
            render_error(str(diag))
        for conflict in app.tools.conflicts:
            console.print(
                f"  conflict: {conflict.name} kept from {conflict.kept}, dropped from {conflict.dropped}",
                style="dim yellow",
                markup=False,
            )
        console.print()
    finally:
        app.close()


@cli.command()
@click.option("--document", "-d", help="Operational config document")
@click.pass_context
def directive(ctx, document):
    """Print the directive sent with every turn."""
    app = _make_app(_load_settings(ctx, document=document))
    try:
        click.echo(app.directive)
    finally:
        app.close()


@cli.command()
@click.pass_context
def config(ctx):
    """Show configuration."""
    manager = ConfigManager(ctx.obj.get("config_path"))
    settings = manager.settings()
    console.print(f"Config file: {manager.config_path}", markup=False)
    console.print(f"Provider: {settings.provider} ({settings.provider_config.model})", markup=False)
    catalog = settings.catalog.base_url if settings.catalog else "disabled"
    console.print(f"Tool catalog: {catalog}", markup=False)
    console.print(f"Config document: {settings.config_document}", markup=False)
    console.print(f"Merge policy: {settings.merge_policy.value}", markup=False)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
