"""
Error reporting for the CLI.

Palette errors carry their own context (mode, setting, item id); this module
logs them and renders them in a Rich panel before exiting with status 1.
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from hyperpalette.exceptions import ConfigurationError, HyperPaletteError

# Errors go to stderr so JSON output stays parseable
console = Console(stderr=True, color_system="auto")

logger = logging.getLogger("hyperpalette")

F = TypeVar("F", bound=Callable[..., Any])


def _title(error: HyperPaletteError) -> str:
    if isinstance(error, ConfigurationError):
        return "Configuration Error"
    return f"{type(error).__name__.replace('Error', '')} Error"


def display_error(error: HyperPaletteError, show_details: bool = False) -> None:
    """Display a palette error in a red panel."""
    message = Text()
    message.append(error.message, style="bold red")

    if show_details and error.context:
        details = "\n".join(f"- {k}: {v}" for k, v in error.context.items())
        message.append(f"\n\nDetails:\n{details}", style="dim red")

    console.print(
        Panel(
            message,
            title=f"[bold]{_title(error)}[/bold]",
            title_align="left",
            border_style="red",
            padding=(0, 1),
        )
    )


def handle_error(error: Exception, operation: str = "unknown", show_details: bool = False) -> None:
    """Log ``error``, show it to the user and exit with status 1."""
    if isinstance(error, HyperPaletteError):
        logger.error(f"{operation}: {error}")
        display_error(error, show_details)
    else:
        logger.error(f"Unexpected error during {operation}: {error}", exc_info=True)
        display_error(
            HyperPaletteError(
                f"An unexpected error occurred during {operation}",
                error_type=type(error).__name__,
                original_error=str(error),
            ),
            show_details=True,
        )
    raise typer.Exit(1)


def safe_operation(operation_name: str, show_details: bool = False) -> Callable[[F], F]:
    """
    Decorator for CLI commands reporting errors through ``handle_error``.

    Args:
        operation_name: Name of the operation for logging
        show_details: Whether to show the error context
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except Exception as e:
                handle_error(e, operation_name, show_details=show_details)

        return wrapper  # type: ignore[return-value]

    return decorator
