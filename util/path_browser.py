"""File and directory listing for the Markdown explorer."""

import os
from pathlib import Path
from typing import List, Optional, Tuple
from dataclasses import dataclass

MARKDOWN_EXTENSION = ".md"


@dataclass
class PathItem:
    """Represents a file or directory item."""
    name: str
    path: str
    is_dir: bool
    size: Optional[int] = None

    @property
    def display_name(self) -> str:
        return f"{self.name}/" if self.is_dir else self.name

    @property
    def is_markdown(self) -> bool:
        return not self.is_dir and Path(self.name).suffix == MARKDOWN_EXTENSION


class PathBrowser:
    """Lists directories for the explorer view."""

    def __init__(self, show_hidden: bool = True):
        """Initialize path browser.

        Args:
            show_hidden: Whether to list dot files and directories
        """
        self.show_hidden = show_hidden

    def list_directory(self, directory_path: str) -> List[PathItem]:
        """List contents of a directory, directories first, each group sorted by name.

        Args:
            directory_path: Path to directory to list

        Returns:
            List of PathItem objects representing directory contents

        Raises:
            FileNotFoundError: If the directory does not exist
            ValueError: If the path is not a directory or cannot be read
        """
        if not os.path.exists(directory_path):
            raise FileNotFoundError(f"Directory not found: {directory_path}")

        if not os.path.isdir(directory_path):
            raise ValueError(f"Path is not a directory: {directory_path}")

        try:
            entries = os.listdir(directory_path)
        except PermissionError:
            raise ValueError(f"Permission denied accessing directory: {directory_path}")

        items = []
        for entry in entries:
            entry_path = os.path.join(directory_path, entry)

            if entry.startswith(".") and not self.show_hidden:
                continue

            try:
                is_dir = os.path.isdir(entry_path)
                size = None if is_dir else os.path.getsize(entry_path)
            except OSError:
                # Skip items we can't access
                continue

            items.append(PathItem(
                name=entry,
                path=entry_path,
                is_dir=is_dir,
                size=size,
            ))

        items.sort(key=lambda item: (not item.is_dir, item.name))
        return items

    def validate_markdown_file(self, file_path: str) -> Tuple[bool, str]:
        """Validate that a file can be previewed.

        Args:
            file_path: Path to file to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not os.path.exists(file_path):
            return False, f"File not found: {file_path}"

        if not os.path.isfile(file_path):
            return False, f"Path is not a file: {file_path}"

        if Path(file_path).suffix != MARKDOWN_EXTENSION:
            return False, "Only Markdown files can be previewed."

        if not os.access(file_path, os.R_OK):
            return False, f"File is not readable: {file_path}"

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                f.read(1024)
        except UnicodeDecodeError:
            return False, f"File is not valid UTF-8 text: {file_path}"
        except OSError as e:
            return False, f"Error reading file: {e}"

        return True, ""

    def format_file_size(self, size_bytes: Optional[int]) -> str:
        """Format file size in human-readable format."""
        if size_bytes is None:
            return ""

        if size_bytes < 1024:
            return f"{size_bytes}B"
        elif size_bytes < 1024 * 1024:
            return f"{size_bytes/1024:.1f}K"
        elif size_bytes < 1024 * 1024 * 1024:
            return f"{size_bytes/(1024*1024):.1f}M"
        else:
            return f"{size_bytes/(1024*1024*1024):.1f}G"
