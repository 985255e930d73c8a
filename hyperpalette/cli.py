"""
Command line interface for hyperpalette.

    hyperpalette check [PATH]     validate a palette file
    hyperpalette keys [PATH]      list the shortcuts a palette binds
    hyperpalette init [PATH]      write an example palette file
    hyperpalette demo [PATH]      run a palette in the terminal
    hyperpalette version
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

import typer
import yaml
from rich.table import Table

from hyperpalette import __version__
from hyperpalette.config.constants import ItemType
from hyperpalette.config.loader import (
    EXAMPLE_CONFIG,
    build_palette,
    get_config_path,
    load_config,
    load_palette,
    save_example_config,
)
from hyperpalette.core.controller import PaletteController
from hyperpalette.keybindings import ConflictSeverity, KeyBindingService
from hyperpalette.utils.error_handling import safe_operation
from hyperpalette.utils.logging import setup_logging
from hyperpalette.utils.output import console, print_json

app = typer.Typer(help="Command palette engine: validate, inspect and try palettes.")

PATH_ARGUMENT = typer.Argument(None, help="Palette file (default: ~/.config/hyperpalette/palette.yaml)")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
):
    """
    hyperpalette - command palette engine

    [bold]Examples:[/bold]

    Create a palette file:
        [cyan]hyperpalette init[/cyan]

    Validate it:
        [cyan]hyperpalette check[/cyan]

    Try it:
        [cyan]hyperpalette demo[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)
    setup_logging(verbose=verbose, quiet=quiet)


def _load(path: Optional[Path]) -> PaletteController:
    palette = load_palette(path, key_bindings=KeyBindingService())
    palette.register_palette_shortcuts()
    return palette


@app.command()
@safe_operation("check palette", show_details=True)
def check(
    path: Optional[Path] = PATH_ARGUMENT,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Validate a palette file and summarize its modes."""
    palette = _load(path)
    conflicts = palette.key_bindings.detect_conflicts()

    if json_output:
        print_json(
            {
                "modes": {
                    name: {
                        "type": mode.type.value,
                        "prefix": mode.prefix,
                        "items": len(mode.raw_items),
                        "shortcut": mode.config.shortcut,
                    }
                    for name, mode in palette.modes.items()
                },
                "conflicts": [c.to_dict() for c in conflicts],
            }
        )
        palette.destroy()
        return

    console.print(f"\n[bold]Palette {path or get_config_path()}[/bold]\n")

    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("Mode", style="bold")
    table.add_column("Type")
    table.add_column("Prefix", style="cyan")
    table.add_column("Items", justify="right")
    table.add_column("Shortcuts", style="dim")

    for name, mode in palette.modes.items():
        table.add_row(
            name,
            mode.type.value.lower(),
            repr(mode.prefix),
            str(len(mode.raw_items)),
            ", ".join(mode.config.shortcut),
        )

    console.print(table)
    console.print()

    if conflicts:
        warnings = len(palette.key_bindings.get_conflicts_by_severity(ConflictSeverity.WARNING))
        console.print(f"[yellow]{len(conflicts)} shortcut conflict(s), {warnings} in the same scope[/yellow]")
        console.print("Run [bold]hyperpalette keys --conflicts[/bold] to see details.")
    else:
        console.print("[green]Palette is valid, no shortcut conflicts.[/green]")
    console.print()
    palette.destroy()


@app.command()
@safe_operation("list shortcuts")
def keys(
    path: Optional[Path] = PATH_ARGUMENT,
    conflicts: bool = typer.Option(False, "--conflicts", "-c", help="Show shortcut conflicts"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List the shortcuts bound by a palette."""
    palette = _load(path)
    service = palette.key_bindings
    detected = service.detect_conflicts()

    if json_output:
        print_json(service.to_dict())
    elif conflicts:
        _show_conflicts(detected)
    else:
        _show_bindings(service)
    palette.destroy()


def _show_bindings(service: KeyBindingService) -> None:
    console.print(f"\n[bold]Shortcuts ({len(service.bindings)})[/bold]\n")

    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("Key", style="bold", width=14)
    table.add_column("Scope", width=10)
    table.add_column("Description", style="dim")

    for binding in sorted(service.bindings, key=lambda b: (b.scope.value, b.key)):
        table.add_row(binding.key, binding.scope.value, binding.description)

    console.print(table)
    console.print()


def _show_conflicts(conflicts) -> None:
    if not conflicts:
        console.print("[green]No shortcut conflicts detected![/green]")
        return

    console.print(f"\n[bold]Shortcut Conflicts ({len(conflicts)})[/bold]\n")

    table = Table(show_header=True, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Binding 1")
    table.add_column("Binding 2")
    table.add_column("Type", style="dim")

    for conflict in conflicts:
        table.add_row(
            conflict.key,
            f"{conflict.binding1.description} ({conflict.binding1.scope.value})",
            f"{conflict.binding2.description} ({conflict.binding2.scope.value})",
            conflict.conflict_type.value,
        )

    console.print(table)
    console.print()


@app.command()
def init(path: Optional[Path] = PATH_ARGUMENT):
    """Write an example palette file."""
    target = path or get_config_path()
    if save_example_config(target):
        console.print(f"[green]Created {target}[/green]")
    else:
        console.print(f"[yellow]{target} already exists[/yellow]")


def _demo_hooks(config: Dict[str, Any], status: Callable[[str], None]) -> Dict[str, Dict[str, Any]]:
    """Mode hooks reporting navigation and selection in the status area."""
    hooks: Dict[str, Dict[str, Any]] = {}
    for name, options in (config.get("modes") or {}).items():
        kind = (options or {}).get("type")
        if kind == ItemType.NAVIGABLE.value:
            hooks[name] = {
                "on_navigation": lambda item: status(f"Navigate to {item.url}"),
            }
        elif kind == ItemType.SEARCHABLE.value:
            hooks[name] = {
                "on_selection": lambda item, source: status(f"Selected {item.name or item.id}"),
            }
    return hooks


@app.command()
@safe_operation("run demo")
def demo(path: Optional[Path] = PATH_ARGUMENT):
    """Run a palette in the terminal (the example palette when no file exists)."""
    from hyperpalette.ui import PaletteApp

    target = path or get_config_path()
    config = load_config(target) if target.exists() or path else yaml.safe_load(EXAMPLE_CONFIG)

    host: Dict[str, PaletteApp] = {}

    def status(text: str) -> None:
        host["app"].set_status(text)

    def action_factory(action: str):
        if action == "quit":
            return lambda item, source, rarg: host["app"].exit()
        return lambda item, source, rarg: status(f"Ran {action} ({source.type.value})")

    options, items = build_palette(
        config, action_factory=action_factory, mode_hooks=_demo_hooks(config, status)
    )
    palette = PaletteController(options)
    for mode, mode_items in items.items():
        if mode_items:
            palette.register_item(mode, mode_items, silent=False)

    host["app"] = PaletteApp(palette)
    host["app"].run()


@app.command()
def version():
    """Show hyperpalette version"""
    typer.echo(f"hyperpalette version {__version__}")


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
