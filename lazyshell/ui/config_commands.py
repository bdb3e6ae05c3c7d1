"""
Configuration Management Commands

Interactive configuration wizard for LazyShell.
This module is lazy-loaded only when config commands are used.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from lazyshell.core.configs import (
    PersistedConfig,
    get_config_path,
    load_persisted_config,
    save_persisted_config,
)
from lazyshell.providers.registry import PROVIDERS, ProviderDescriptor, get_available_providers
from lazyshell.utils.detection import collect_system_facts

console = Console()


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return "[dim]not set[/dim]"
    if len(value) > 8:
        return f"{value[:4]}...{value[-4:]}"
    return "***"


def handle_config(action: str) -> None:
    """
    Route to appropriate config action.

    Args:
        action: One of 'init', 'show', or 'path'
    """
    actions = {
        "init": init_config,
        "show": show_config,
        "path": show_config_path,
    }

    if action not in actions:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Available actions: init, show, path")
        raise SystemExit(1)

    try:
        actions[action]()
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Configuration cancelled[/yellow]")
        raise SystemExit(130)


def init_config() -> None:
    """
    Interactive configuration wizard.
    Works on both new and existing configurations.
    """
    console.print(Panel.fit("[bold blue]LazyShell Configuration[/bold blue]", title="Setup"))

    existing = load_persisted_config()
    facts = collect_system_facts()
    console.print(
        f"[dim]Detected {facts.platform} ({facts.arch}), shell: {facts.shell_name}[/dim]"
    )

    descriptor = configure_provider(existing.provider if existing else None)
    same_provider = existing is not None and existing.provider == descriptor.key

    model = configure_model(descriptor, existing.model if same_provider else None)
    base_url = configure_base_url(descriptor, existing.base_url if same_provider else None)
    api_key = configure_api_key(descriptor, existing.api_key if same_provider else None)

    config = PersistedConfig(
        provider=descriptor.key, api_key=api_key, model=model, base_url=base_url
    )
    path = get_config_path()
    if not save_persisted_config(config, path):
        console.print(f"[red]Could not write {path}[/red]")
        raise SystemExit(1)

    console.print(
        Panel.fit(
            f"[green]Configuration saved![/green]\nLocation: {path}",
            title="Success",
        )
    )


def configure_provider(current: Optional[str]) -> ProviderDescriptor:
    console.print("\n[bold cyan]LLM Provider[/bold cyan]")

    if current in PROVIDERS:
        console.print(f"Current: {PROVIDERS[current].name}")
        if not Confirm.ask("Change provider?", default=False):
            return PROVIDERS[current]

    keys = get_available_providers()
    for idx, key in enumerate(keys, 1):
        descriptor = PROVIDERS[key]
        console.print(f"  {idx}. {descriptor.name} [dim]({descriptor.description})[/dim]")

    choice = Prompt.ask(
        "Select provider",
        choices=[str(i) for i in range(1, len(keys) + 1)],
        default="1",
    )
    return PROVIDERS[keys[int(choice) - 1]]


def configure_model(descriptor: ProviderDescriptor, current: Optional[str]) -> Optional[str]:
    """Returns None when the provider default is kept."""
    console.print("\n[bold cyan]Model[/bold cyan]")
    model = Prompt.ask(
        f"Model for {descriptor.name}", default=current or descriptor.default_model_id
    ).strip()
    if not model or model == descriptor.default_model_id:
        return None
    return model


def configure_base_url(descriptor: ProviderDescriptor, current: Optional[str]) -> Optional[str]:
    if not descriptor.supports_custom_base_url:
        return None

    console.print("\n[bold cyan]Server URL[/bold cyan]")
    default = current or descriptor.base_url or ""
    base_url = Prompt.ask(f"{descriptor.name} base URL", default=default).strip()
    if not base_url or base_url == descriptor.base_url:
        return None
    return base_url


def configure_api_key(descriptor: ProviderDescriptor, current: Optional[str]) -> Optional[str]:
    """
    Ask for the provider's API key.

    An empty answer stores no key; resolution then reads the provider's
    environment variable instead.
    """
    if descriptor.api_key_env_var is None:
        return None

    console.print("\n[bold cyan]API Key[/bold cyan]")

    if current:
        console.print(f"Current {descriptor.name} API key: {mask_secret(current)}")
        if not Confirm.ask("Update API key?", default=False):
            return current

    optional = " (optional)" if descriptor.api_key_optional else ""
    console.print(f"[dim]Leave empty to use ${descriptor.api_key_env_var}{optional}[/dim]")
    new_key = Prompt.ask(f"Enter {descriptor.name} API key", password=True, default="")
    return new_key.strip() or None


def show_config() -> None:
    """Display current configuration in a formatted table."""
    path = get_config_path()
    if not path.exists():
        console.print("[yellow]No configuration found. Run 'lazyshell config init'[/yellow]")
        return

    config = load_persisted_config(path)
    if config is None:
        console.print(f"[red]Configuration at {path} is invalid[/red]")
        raise SystemExit(1)

    descriptor = PROVIDERS[config.provider]
    table = Table(title="LazyShell Configuration", show_header=True)
    table.add_column("Setting", style="cyan", width=25)
    table.add_column("Value", style="green")

    table.add_row("provider", f"{descriptor.name} ({config.provider})")
    table.add_row("model", config.model or f"{descriptor.default_model_id} [dim](default)[/dim]")
    if descriptor.supports_custom_base_url:
        table.add_row("baseUrl", config.base_url or f"{descriptor.base_url or ''} [dim](default)[/dim]")
    table.add_row("apiKey", mask_secret(config.api_key))
    table.add_row("version", config.version)

    console.print(table)
    console.print(f"\n[dim]Config file: {path}[/dim]")


def show_config_path() -> None:
    console.print(str(get_config_path()), soft_wrap=True, highlight=False)
