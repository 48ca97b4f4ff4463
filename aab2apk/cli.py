"""
aab2apk CLI.

Entry point of the export step. Inputs come from the step environment and can
be overridden with options.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.config import APKS_PATH_ENV_KEY, StepConfig, get_config
from .core.exceptions import Aab2ApkError, ValidationError
from .core.logging import get_logger, setup_logging

app = typer.Typer(
    name="aab2apk",
    help="Export a universal APK from an Android App Bundle",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"aab2apk v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """aab2apk: AAB to universal APK build step."""
    pass


def _config_table(cfg: StepConfig) -> Table:
    table = Table(title="Step Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("AAB Path", str(cfg.aab_path))
    table.add_row("Signing", "enabled" if cfg.signing_enabled else "disabled")
    if cfg.signing_enabled:
        table.add_row("Keystore Path", str(cfg.keystore_path))
        table.add_row("Keystore Password", str(cfg.keystore_password))
        table.add_row("Key Alias", str(cfg.keystore_alias))
        table.add_row("Key Password", str(cfg.private_key_password))
    table.add_row("bundletool", str(cfg.bundletool_path or cfg.bundletool_version))
    table.add_row("Java", cfg.java_path)
    table.add_row("Output Dir", str(cfg.output_dir or "(temporary directory)"))
    table.add_row("Log Level", cfg.log_level)
    return table


def _load_config(**overrides: object) -> StepConfig:
    try:
        return StepConfig.from_env(**overrides) if overrides else get_config()
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1)


@app.command()
def export(
    aab_path: Optional[Path] = typer.Option(
        None,
        "--aab",
        "-a",
        help="Path to the AAB file (env: aab_path)",
    ),
    keystore_path: Optional[Path] = typer.Option(
        None,
        "--keystore",
        help="Keystore used to sign the APK (env: keystore_path)",
    ),
    keystore_password: Optional[str] = typer.Option(
        None,
        "--keystore-password",
        help="Keystore password (env: keystore_password)",
    ),
    keystore_alias: Optional[str] = typer.Option(
        None,
        "--key-alias",
        help="Signing key alias (env: keystore_alias)",
    ),
    private_key_password: Optional[str] = typer.Option(
        None,
        "--key-password",
        help="Signing key password (env: private_key_password)",
    ),
    bundletool_version: Optional[str] = typer.Option(
        None,
        "--bundletool-version",
        help="bundletool release to download (env: bundletool_version)",
    ),
    bundletool_path: Optional[Path] = typer.Option(
        None,
        "--bundletool-path",
        help="Use a local bundletool jar instead of downloading one",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory receiving the APK (env: BITRISE_DEPLOY_DIR)",
    ),
    envman: bool = typer.Option(
        True,
        "--envman/--no-envman",
        help=f"Publish the APK path as {APKS_PATH_ENV_KEY} with envman",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """Export a universal APK from an AAB and publish its path."""
    cfg = _load_config(
        aab_path=aab_path,
        keystore_path=keystore_path,
        keystore_password=keystore_password,
        keystore_alias=keystore_alias,
        private_key_password=private_key_password,
        bundletool_version=bundletool_version,
        bundletool_path=bundletool_path,
        output_dir=output_dir,
    )
    setup_logging(cfg, level_name="DEBUG" if verbose else None)

    console.print(Panel.fit(
        "[bold blue]aab2apk[/bold blue]\n"
        "AAB → bundletool → Universal APK",
        border_style="blue",
    ))
    console.print(_config_table(cfg))

    from .orchestration import run_export
    from .tools.envman import export_env

    try:
        result = run_export(cfg)
        if envman:
            export_env(APKS_PATH_ENV_KEY, str(result.apk_path))
    except (Aab2ApkError, OSError) as e:
        logger.error("Failed to export apk", error=str(e))
        console.print(f"\n[bold red]✗ Failed to export apk:[/bold red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1)

    console.print(f"\n[bold green]✓ Success, apk exported to:[/bold green] {result.apk_path}")
    console.print(f"[dim]Duration: {result.duration_seconds:.1f}s[/dim]")


@app.command()
def config() -> None:
    """Show the resolved step configuration."""
    cfg = _load_config()
    console.print(_config_table(cfg))

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  aab_path, keystore_path, keystore_password, keystore_alias, private_key_password")
    console.print("  bundletool_version, bundletool_path, java_path, BITRISE_DEPLOY_DIR, AAB2APK_LOG_LEVEL")


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
