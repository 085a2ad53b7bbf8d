"""Process-wide registry of spawned subprocesses.

Every assistant subprocess is added on spawn and discarded on exit so that a
global cancel (Ctrl-C, SIGTERM, interpreter exit) can terminate whatever is
still running: SIGTERM first, SIGKILL after a short grace period.

The registry is touched from signal handlers. Python runs those handlers on
the main thread between bytecodes, so a plain set with snapshot iteration is
enough; there is no second thread to lock against.
"""

import asyncio
import atexit
import logging
import os
import signal
import sys
import time
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 0.5


class Killable(Protocol):
    """Subset of asyncio.subprocess.Process / subprocess.Popen the registry needs."""

    pid: int

    @property
    def returncode(self) -> int | None: ...

    def terminate(self) -> None: ...

    def kill(self) -> None: ...


class ProcessRegistry:
    """Tracks live child processes and terminates them on demand."""

    def __init__(self, grace_period: float = DEFAULT_GRACE_PERIOD) -> None:
        self.grace_period = grace_period
        self._procs: set[Killable] = set()
        self._handlers_installed = False
        self._on_cancel: Callable[[], None] | None = None

    def add(self, proc: Killable) -> None:
        self._procs.add(proc)

    def discard(self, proc: Killable) -> None:
        self._procs.discard(proc)

    def __len__(self) -> int:
        return len(self._procs)

    def active(self) -> list[Killable]:
        """Tracked processes that have not reported an exit code."""
        return [p for p in list(self._procs) if p.returncode is None]

    async def stop(self, proc: Killable, grace_period: float | None = None) -> None:
        """Terminate one process, escalating to kill, then stop tracking it."""
        grace = self.grace_period if grace_period is None else grace_period
        try:
            if proc.returncode is None:
                _send(proc.terminate)
                wait = getattr(proc, "wait", None)
                if wait is not None:
                    try:
                        await asyncio.wait_for(wait(), timeout=grace)
                    except asyncio.TimeoutError:
                        logger.warning("Process %s ignored SIGTERM; killing", proc.pid)
                        _send(proc.kill)
                        await wait()
                else:
                    await asyncio.sleep(grace)
                    if proc.returncode is None:
                        _send(proc.kill)
        finally:
            self.discard(proc)

    def terminate_all(self, grace_period: float | None = None) -> int:
        """Synchronously terminate every tracked process. Safe from a signal handler.

        Returns the number of processes that were signalled.
        """
        grace = self.grace_period if grace_period is None else grace_period
        procs = self.active()
        for proc in procs:
            _send(proc.terminate)
        if procs:
            logger.info("Terminating %d child process(es)", len(procs))
            deadline = time.monotonic() + grace
            while time.monotonic() < deadline and any(_alive(p) for p in procs):
                time.sleep(0.05)
            for proc in procs:
                if _alive(proc):
                    _send(proc.kill)
        self._procs.clear()
        return len(procs)

    def install_signal_handlers(self, on_cancel: Callable[[], None] | None = None) -> bool:
        """Register cleanup for SIGINT/SIGTERM/SIGHUP and interpreter exit, once.

        SIGINT terminates children and then raises KeyboardInterrupt so the CLI's
        cancellation path runs. Returns False when handlers were already installed.
        """
        if self._handlers_installed:
            return False
        self._handlers_installed = True
        self._on_cancel = on_cancel
        atexit.register(self.terminate_all)

        def _on_interrupt(signum: int, frame: Any) -> None:
            self.terminate_all()
            if self._on_cancel is not None:
                self._on_cancel()
            raise KeyboardInterrupt

        def _on_terminate(signum: int, frame: Any) -> None:
            self.terminate_all()
            sys.exit(128 + signum)

        signal.signal(signal.SIGINT, _on_interrupt)
        for name in ("SIGTERM", "SIGHUP"):
            sig = getattr(signal, name, None)
            if sig is None:
                continue
            try:
                signal.signal(sig, _on_terminate)
            except (ValueError, OSError):
                pass  # not available on this platform / not main thread
        return True


def _alive(proc: Killable) -> bool:
    poll = getattr(proc, "poll", None)
    if poll is not None:
        return poll() is None
    if proc.returncode is not None:
        return False
    if sys.platform == "win32" or not isinstance(proc, asyncio.subprocess.Process):
        return True
    # asyncio only updates returncode from the running loop, which is blocked here
    try:
        pid, _ = os.waitpid(proc.pid, os.WNOHANG)
    except ChildProcessError:
        return False  # reaped elsewhere
    return pid == 0


def _send(action: Callable[[], None]) -> None:
    try:
        action()
    except ProcessLookupError:
        pass  # already exited
    except OSError as e:
        logger.debug("Signal delivery failed: %s", e)


registry = ProcessRegistry()
