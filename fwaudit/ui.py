"""Central UI handler for fwaudit.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.
"""

import sys

from rich.console import Console
from rich.theme import Theme

FWAUDIT_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

console = Console(
    theme=FWAUDIT_THEME,
    force_terminal=sys.stdout.isatty(),
)

SEVERITY_STYLES = {
    "error": "error",
    "warning": "warning",
    "info": "info",
}


def print_envelope(envelope: dict) -> None:
    """Print an operation envelope as highlighted JSON."""
    console.print_json(data=envelope)
