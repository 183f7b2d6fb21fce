from __future__ import annotations

import argparse
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .config import ConfigError, load_config
from .document import Document
from .editor import HELP_MESSAGE, EditorSession, open_file, run
from .eventlog import SessionLog
from .fileio import TextFileStore
from .terminal import Terminal, TerminalError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="kiloed", description="A small raw-mode terminal text editor"
    )
    parser.add_argument("file", nargs="?", help="File to open")
    parser.add_argument(
        "--tab-stop", type=int, default=None, help="Tab stop width (default: 8)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the rc file (default: ~/.kiloedrc)",
    )
    parser.add_argument(
        "--log-path",
        default=None,
        help="Append a JSON-lines session log to this file",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Include debug events in the session log",
    )
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    try:
        config = load_config(args.config).with_overrides(
            tab_stop=args.tab_stop, log_path=args.log_path
        )
    except ConfigError as exc:
        console.print(f"[bold red]Error:[/] {escape(str(exc))}", highlight=False)
        return 1

    log = SessionLog(config.log_path, verbose=args.verbose)
    session = EditorSession(
        document=Document(tab_stop=config.tab_stop),
        screen_rows=0,
        screen_cols=0,
        config=config,
        store=TextFileStore(),
        log=log,
    )
    if args.file:
        try:
            open_file(session, args.file)
        except OSError as exc:
            log.error("fatal", error=str(exc))
            reason = exc.strerror or str(exc)
            console.print(
                f"[bold red]Error:[/] cannot open {escape(args.file)}: {escape(reason)}",
                highlight=False,
            )
            return 1

    terminal = Terminal(read_timeout=config.read_timeout)
    try:
        terminal.enter_raw_mode()
        rows, cols = terminal.query_screen_size()
        session.screen_rows = max(1, rows - 2)
        session.screen_cols = cols
        log.event("started", file=args.file, rows=rows, cols=cols)
        session.set_status_message(HELP_MESSAGE)
        run(session, terminal)
        terminal.leave_raw_mode()
    except Exception as exc:
        return _die(terminal, console, log, exc)
    return 0


def _die(terminal: Terminal, console: Console, log: SessionLog, exc: Exception) -> int:
    log.error("fatal", error=str(exc))
    for cleanup in (terminal.clear_screen, terminal.leave_raw_mode):
        try:
            cleanup()
        except TerminalError:
            pass  # best effort on the way out
    console.print(f"[bold red]Error:[/] {escape(str(exc))}", highlight=False)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
