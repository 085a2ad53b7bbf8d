"""Tests for the assistant subprocess runner, using small shell scripts as the assistant."""

import asyncio
import os
import sys
import time
from pathlib import Path

import pytest

from saasfactory.ai.runner import (
    AssistantFailedError,
    AssistantRunner,
    AssistantTimeoutError,
    AssistantUnavailableError,
    extract_json_object,
    format_elapsed,
    is_assistant_available,
    run_external_task,
    set_runner,
)
from saasfactory.ai.stream import ProgressEvent
from saasfactory.core.processes import ProcessRegistry

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell scripts")

STREAM = r"""{"type":"system","subtype":"init","session_id":"sess-1"}
{"type":"assistant","message":{"content":[{"type":"tool_use","name":"WebSearch","input":{"query":"invoice tools"}}]}}
not json at all
{"type":"user","message":{"content":[{"type":"tool_result","content":"see https://www.example.com/a and https://acme.io"}]}}
{"type":"user","message":{"content":[{"type":"tool_result","content":"again https://example.com/b"}]}}
{"type":"result","result":"{\"ok\": true}","session_id":"sess-1"}
"""


def script(tmp_path: Path, name: str, body: str) -> str:
    path = tmp_path / name
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(0o755)
    return str(path)


def make_runner(command: str, **kwargs) -> AssistantRunner:
    return AssistantRunner(command, registry=ProcessRegistry(grace_period=0.2), **kwargs)


@pytest.mark.asyncio
async def test_run_task_parses_stream(tmp_path: Path) -> None:
    """Progress is classified and sources are deduplicated across the task."""
    command = script(tmp_path, "stream.sh", f"cat <<'EOF'\n{STREAM}EOF\n")
    runner = make_runner(command)
    events: list[ProgressEvent] = []
    result = await runner.run_task("research", timeout=10, on_progress=events.append)

    assert result.text == '{"ok": true}'
    assert result.session_id == "sess-1"
    assert result.search_count == 1
    assert result.sources == ["example.com", "acme.io"]
    kinds = [e.kind for e in events]
    assert kinds == ["search", "sources", "final"]
    assert events[0].query == "invoice tools"
    assert len(runner.registry) == 0


@pytest.mark.asyncio
async def test_external_task_timeout_kills_child(tmp_path: Path) -> None:
    """A task that never exits is rejected near its timeout and leaves no child behind."""
    command = script(tmp_path, "hang.sh", "exec sleep 30\n")
    runner = make_runner(command, heartbeat_interval=0.5)
    started = time.monotonic()
    with pytest.raises(AssistantTimeoutError):
        await runner.run_task("research", timeout=2)
    elapsed = time.monotonic() - started
    assert 1.9 <= elapsed < 3.0
    assert len(runner.registry) == 0
    assert runner.registry.active() == []


def test_runner_keeps_injected_registry() -> None:
    registry = ProcessRegistry(grace_period=0.2)
    assert AssistantRunner("assistant", registry=registry).registry is registry


@pytest.mark.asyncio
async def test_global_cancel_during_task_leaves_no_child(tmp_path: Path) -> None:
    """Cancelling everything while a task streams kills a child that ignores SIGTERM."""
    command = script(tmp_path, "stubborn.sh", "trap '' TERM\nexec sleep 30\n")
    runner = make_runner(command)
    task = asyncio.create_task(runner.run_task("research", timeout=20))
    while not runner.registry.active():
        await asyncio.sleep(0.05)
    pid = runner.registry.active()[0].pid

    assert runner.registry.terminate_all() == 1
    with pytest.raises(AssistantFailedError):
        await asyncio.wait_for(task, timeout=5)
    assert len(runner.registry) == 0
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


@pytest.mark.asyncio
async def test_heartbeat_reports_quiet_periods(tmp_path: Path) -> None:
    command = script(tmp_path, "slow.sh", "sleep 1\necho '{\"type\":\"result\",\"result\":\"done\"}'\n")
    runner = make_runner(command, heartbeat_interval=0.3)
    events: list[ProgressEvent] = []
    result = await runner.run_task("research", timeout=10, on_progress=events.append)
    assert result.text == "done"
    assert any(e.kind == "status" and "elapsed" in e.message for e in events)


@pytest.mark.asyncio
async def test_generate_json_output(tmp_path: Path) -> None:
    command = script(tmp_path, "json.sh", "echo '{\"result\": \"hello\", \"session_id\": \"s-2\"}'\n")
    result = await make_runner(command).generate("hi", output_format="json", timeout=10)
    assert result.text == "hello"
    assert result.session_id == "s-2"


@pytest.mark.asyncio
async def test_generate_nonzero_exit(tmp_path: Path) -> None:
    command = script(tmp_path, "fail.sh", "echo boom >&2\nexit 3\n")
    with pytest.raises(AssistantFailedError) as info:
        await make_runner(command).generate("hi", timeout=10)
    assert info.value.exit_code == 3
    assert "boom" in info.value.stderr


@pytest.mark.asyncio
async def test_error_result_in_stream(tmp_path: Path) -> None:
    command = script(tmp_path, "err.sh", "echo '{\"type\":\"result\",\"result\":\"quota\",\"is_error\":true}'\n")
    with pytest.raises(AssistantFailedError, match="quota"):
        await make_runner(command).run_task("x", timeout=10)


@pytest.mark.asyncio
async def test_missing_command(tmp_path: Path) -> None:
    runner = make_runner(str(tmp_path / "does-not-exist"))
    assert await runner.is_available() is False
    with pytest.raises(AssistantUnavailableError):
        await runner.generate("hi")


@pytest.mark.asyncio
async def test_is_available_probe_is_cached(tmp_path: Path) -> None:
    marker = tmp_path / "calls"
    command = script(tmp_path, "version.sh", f"echo x >> {marker}\necho 1.0.0\n")
    runner = make_runner(command)
    assert await runner.is_available() is True
    assert await runner.is_available() is True
    assert marker.read_text().count("x") == 1


@pytest.mark.asyncio
async def test_module_helpers_use_installed_runner(tmp_path: Path) -> None:
    command = script(tmp_path, "stream.sh", f"cat <<'EOF'\n{STREAM}EOF\n")
    set_runner(make_runner(command))
    assert await is_assistant_available() is True
    result = await run_external_task("research", timeout=10)
    assert result.session_id == "sess-1"


def test_build_args() -> None:
    runner = AssistantRunner("assistant")
    args = runner.build_args(
        "prompt", output_format="stream-json", allowed_tools=["WebSearch", "WebFetch"], max_turns=5, resume="s"
    )
    assert args == [
        "assistant", "-p", "prompt", "--output-format", "stream-json", "--verbose",
        "--allowedTools", "WebSearch,WebFetch", "--max-turns", "5", "--resume", "s",
    ]


def test_extract_json_object() -> None:
    assert extract_json_object('Sure! {"a": 1} hope that helps') == {"a": 1}
    assert extract_json_object("no json") is None
    assert extract_json_object("{broken") is None


def test_format_elapsed() -> None:
    assert format_elapsed(42) == "42s"
    assert format_elapsed(125) == "2m 5s"
