#!/usr/bin/env python3
"""
mdview: Terminal Markdown browser and viewer

Features
- Directory explorer with vi-style navigation (j/k, Enter, h)
- Styled preview of Markdown files: headings, quotes, lists, box-drawn tables,
  bordered code blocks, inline styles
- Literal <br> markers survive inside table cells
- ':hp <file>' shows the HTML rendering, ':q' quits
- Non-interactive --dump / --html output for pipes

Requirements
    pip install rich markdown-it-py prompt_toolkit
"""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from render.break_marker import BR_PLACEHOLDER, BreakMode
from render.markdown_doc import DEFAULT_RULE_WIDTH, render_html, render_markdown
from render.theme import DEFAULT_THEME, Theme, available_themes, get_theme
from viewer.app import MarkdownViewerApp

# ---------------- Configuration ----------------
THEME_ENV = "MDVIEW_THEME"
BR_MODE_ENV = "MDVIEW_BR_MODE"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
console = Console()
logger = logging.getLogger("mdview")


def configure_logging(log_file: Optional[Path], debug: bool = False) -> None:
    """Send log records to ``log_file`` only; the full-screen UI owns the terminal."""
    if log_file is None:
        logging.getLogger().addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=str(log_file),
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )


def dump_file(
    path: Path,
    *,
    html: bool,
    placeholder: str,
    theme: Theme,
    break_mode: BreakMode,
    rule_width: int,
) -> int:
    """Print the rendered document (or its HTML) and exit."""
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Cannot read {path}[/red]: {e}")
        return 1

    if html:
        console.print(render_html(source), markup=False, highlight=False, end="")
        return 0

    document = render_markdown(source, placeholder, theme, break_mode=break_mode, rule_width=rule_width)
    logger.info("Rendered %s: %d lines", path, document.height)
    console.print(document.to_text(), soft_wrap=True)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mdview", description="Browse and preview Markdown files in the terminal")
    parser.add_argument("path", nargs="?", type=Path, help="Directory to browse or Markdown file to open (default: current directory)")
    parser.add_argument(
        "--theme",
        default=os.getenv(THEME_ENV, DEFAULT_THEME),
        help=f"Color theme: {', '.join(available_themes())} (default: {DEFAULT_THEME}, env {THEME_ENV})",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--dump", action="store_true", help="Print the rendered file to stdout and exit")
    output.add_argument("--html", action="store_true", help="Print the HTML rendering of the file and exit")
    parser.add_argument(
        "--br-mode",
        default=os.getenv(BR_MODE_ENV, BreakMode.MARKER.value),
        choices=[mode.value for mode in BreakMode],
        help=f"How literal <br> markers are shown (default: marker, env {BR_MODE_ENV})",
    )
    parser.add_argument("--placeholder", default=BR_PLACEHOLDER, help="Token protecting <br> markers from the tokenizer")
    parser.add_argument("--rule-width", type=int, default=DEFAULT_RULE_WIDTH, help=f"Width of horizontal rules (default {DEFAULT_RULE_WIDTH})")
    parser.add_argument("--no-hidden", action="store_true", help="Do not list dot files and directories in the explorer")
    parser.add_argument("--log-file", type=Path, help="Write log records to this file")
    parser.add_argument("--debug", action="store_true", help="Log at debug level (with --log-file)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file, args.debug)

    try:
        theme = get_theme(args.theme)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        return 2

    # argparse checks choices only for values given on the command line, not the environment default
    try:
        break_mode = BreakMode(args.br_mode)
    except ValueError:
        parser.error(f"invalid {BR_MODE_ENV} value '{args.br_mode}' (choose from marker, newline)")

    target = args.path or Path.cwd()

    if args.dump or args.html:
        if not target.is_file():
            console.print(f"[red]Not a file[/red]: {target}")
            return 1
        return dump_file(
            target,
            html=args.html,
            placeholder=args.placeholder,
            theme=theme,
            break_mode=break_mode,
            rule_width=args.rule_width,
        )

    start_dir = target.parent if target.is_file() else target
    try:
        app = MarkdownViewerApp(
            start_dir,
            theme,
            args.placeholder,
            break_mode=break_mode,
            rule_width=args.rule_width,
            show_hidden=not args.no_hidden,
        )
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Cannot browse {start_dir}[/red]: {e}")
        return 1

    if target.is_file():
        app.open_file(target)

    try:
        app.run()
    except (EOFError, KeyboardInterrupt):
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
