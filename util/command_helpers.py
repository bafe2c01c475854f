"""Command handling for the explorer's ':' command line."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from viewer.explorer import ExplorerState
from viewer.preview import PreviewState

COMMAND_HELP = [
    ("q", "Quit the program"),
    ("hp <file>", "Preview the HTML rendering of a Markdown file"),
    ("help", "Show the available commands"),
]


class CommandAction(Enum):
    NONE = "none"
    QUIT = "quit"
    PREVIEW = "preview"


@dataclass
class CommandResult:
    action: CommandAction = CommandAction.NONE
    preview: Optional[PreviewState] = None


def parse_command(command_text: str) -> List[str]:
    """Split a command line into words."""
    return command_text.split()


def help_text() -> str:
    return " | ".join(f":{name} {description}" for name, description in COMMAND_HELP)


def handle_command(command_text: str, explorer: ExplorerState) -> CommandResult:
    """Run one ':' command against the explorer.

    Errors never propagate; they are left in ``explorer.error_message`` for the
    status bar.

    Returns:
        CommandResult describing what the caller should do next
    """
    explorer.error_message = None
    parts = parse_command(command_text)

    if not parts:
        return CommandResult()

    if parts == ["q"]:
        return CommandResult(CommandAction.QUIT)

    if parts == ["help"]:
        explorer.error_message = help_text()
        return CommandResult()

    if len(parts) == 2 and parts[0] == "hp":
        return _handle_html_preview(parts[1], explorer)

    explorer.error_message = f"Unknown command: {command_text.strip()}"
    return CommandResult()


def _handle_html_preview(filename: str, explorer: ExplorerState) -> CommandResult:
    file_path = explorer.current_path / filename
    if not file_path.is_file():
        explorer.error_message = f"File not found: {filename}"
        return CommandResult()

    try:
        preview = PreviewState.from_html(file_path)
    except (OSError, UnicodeDecodeError) as e:
        explorer.error_message = f"File read error: {e}"
        return CommandResult()

    return CommandResult(CommandAction.PREVIEW, preview)
