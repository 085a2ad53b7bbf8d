"""Terminal utilities for leaving the console usable after prompts or a cancel."""

import subprocess
import sys


def reset_terminal() -> None:
    """Restore a sane tty after prompt_toolkit was interrupted mid-prompt.

    A Ctrl-C or a killed child can leave echo off or the console in raw mode.
    No-op when stdin is not a terminal.
    """
    if not sys.stdin.isatty() or sys.platform == "win32":
        return
    try:
        subprocess.run(
            ["stty", "sane"],
            stdin=sys.stdin,
            capture_output=True,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError):
        pass
