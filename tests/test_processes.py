"""Tests for the process registry."""

import asyncio
import sys
import time

import pytest

from saasfactory.core.processes import ProcessRegistry

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX sleep")


class FakeProc:
    def __init__(self, stubborn: bool = False) -> None:
        self.pid = 4242
        self.returncode: int | None = None
        self.stubborn = stubborn
        self.signals: list[str] = []

    def terminate(self) -> None:
        self.signals.append("term")
        if not self.stubborn:
            self.returncode = -15

    def kill(self) -> None:
        self.signals.append("kill")
        self.returncode = -9


def test_terminate_all_escalates_and_clears() -> None:
    """Processes ignoring SIGTERM are killed after the grace period."""
    reg = ProcessRegistry(grace_period=0.05)
    polite, stubborn = FakeProc(), FakeProc(stubborn=True)
    reg.add(polite)
    reg.add(stubborn)
    assert reg.terminate_all() == 2
    assert polite.signals == ["term"]
    assert stubborn.signals == ["term", "kill"]
    assert len(reg) == 0


def test_terminate_all_skips_exited() -> None:
    reg = ProcessRegistry(grace_period=0.01)
    done = FakeProc()
    done.returncode = 0
    reg.add(done)
    assert reg.terminate_all() == 0
    assert done.signals == []
    assert len(reg) == 0


@pytest.mark.asyncio
async def test_stop_real_subprocess() -> None:
    """stop() terminates a live child and forgets it."""
    reg = ProcessRegistry(grace_period=1.0)
    proc = await asyncio.create_subprocess_exec("sleep", "30")
    reg.add(proc)
    assert reg.active() == [proc]
    await reg.stop(proc)
    assert proc.returncode is not None
    assert len(reg) == 0


@pytest.mark.asyncio
async def test_terminate_all_returns_once_children_exit() -> None:
    """A child that exits on SIGTERM is not waited on for the whole grace period."""
    reg = ProcessRegistry(grace_period=5.0)
    proc = await asyncio.create_subprocess_exec("sleep", "30")
    reg.add(proc)
    started = time.monotonic()
    assert reg.terminate_all() == 1
    assert time.monotonic() - started < 2.0
    await asyncio.wait_for(proc.wait(), timeout=5)
