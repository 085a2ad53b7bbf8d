"""Runs the external AI assistant CLI as a subprocess.

Two call styles:

* ``generate`` waits for the whole answer (text or JSON output format).
* ``run_task`` reads the incremental ``stream-json`` event stream, reports
  classified progress as it arrives, and emits a synthetic "still working"
  status whenever the stream has been quiet for ``heartbeat_interval``.

Both close stdin, enforce a wall-clock timeout, and keep the child in the
process registry for as long as it runs so a global cancel can reach it.
"""

import asyncio
import json
import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from saasfactory.ai.stream import ProgressEvent, StreamParser
from saasfactory.core.errors import SaasFactoryError
from saasfactory.core.processes import ProcessRegistry, registry as default_registry
from saasfactory.core.settings import get_setting

logger = logging.getLogger(__name__)

OutputFormat = Literal["text", "json", "stream-json"]
ProgressCallback = Callable[[ProgressEvent], None]

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class AssistantError(SaasFactoryError):
    """Base class for assistant invocation failures. Callers fall back, never crash."""

    code = "ASSISTANT_ERROR"


class AssistantUnavailableError(AssistantError):
    code = "ASSISTANT_UNAVAILABLE"


class AssistantTimeoutError(AssistantError):
    code = "ASSISTANT_TIMEOUT"


class AssistantFailedError(AssistantError):
    code = "ASSISTANT_FAILED"

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


@dataclass
class TaskResult:
    text: str
    session_id: str | None = None
    search_count: int = 0
    sources: list[str] = field(default_factory=list)


def format_elapsed(seconds: float) -> str:
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes}m {secs}s" if minutes else f"{secs}s"


def extract_json_object(text: str) -> dict[str, Any] | None:
    """First {...} block in an assistant reply, parsed. None when absent or invalid."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


class AssistantRunner:
    """Invokes the assistant CLI. One instance per process is enough."""

    def __init__(
        self,
        command: str = "claude",
        *,
        registry: ProcessRegistry | None = None,
        heartbeat_interval: float = 5.0,
        default_timeout: float = 120.0,
    ) -> None:
        self.command = command
        self.registry = registry if registry is not None else default_registry
        self.heartbeat_interval = heartbeat_interval
        self.default_timeout = default_timeout
        self._available: bool | None = None

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "AssistantRunner":
        return cls(
            command=get_setting(settings, "assistant.command", "claude"),
            heartbeat_interval=float(get_setting(settings, "assistant.heartbeat_interval", 5.0)),
            default_timeout=float(get_setting(settings, "assistant.timeouts.generate", 120)),
        )

    def build_args(
        self,
        prompt: str,
        *,
        output_format: OutputFormat | None = None,
        allowed_tools: list[str] | None = None,
        max_turns: int | None = None,
        resume: str | None = None,
        system_prompt: str | None = None,
    ) -> list[str]:
        args = [self.command, "-p", prompt]
        if output_format:
            args += ["--output-format", output_format]
            if output_format == "stream-json":
                args.append("--verbose")
        if system_prompt:
            args += ["--system-prompt", system_prompt]
        if allowed_tools:
            args += ["--allowedTools", ",".join(allowed_tools)]
        if max_turns:
            args += ["--max-turns", str(max_turns)]
        if resume:
            args += ["--resume", resume]
        return args

    async def is_available(self) -> bool:
        """Probe ``<command> --version`` once; the answer is cached for the process."""
        if self._available is not None:
            return self._available
        try:
            proc = await self._spawn([self.command, "--version"])
        except AssistantUnavailableError:
            self._available = False
            return False
        try:
            await asyncio.wait_for(proc.communicate(), timeout=10)
            self._available = proc.returncode == 0
        except asyncio.TimeoutError:
            await self.registry.stop(proc)
            self._available = False
        finally:
            self.registry.discard(proc)
        logger.info("Assistant %r available: %s", self.command, self._available)
        return self._available

    async def _spawn(self, args: list[str]) -> asyncio.subprocess.Process:
        env = os.environ.copy()
        env["CI"] = "true"
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise AssistantUnavailableError(
                f"Assistant command {self.command!r} not found",
                suggestion="Install the assistant CLI or run with --skip-ai",
            ) from e
        self.registry.add(proc)
        logger.debug("Spawned assistant pid=%s", proc.pid)
        return proc

    async def generate(
        self,
        prompt: str,
        *,
        output_format: Literal["text", "json"] = "text",
        allowed_tools: list[str] | None = None,
        max_turns: int | None = None,
        resume: str | None = None,
        system_prompt: str | None = None,
        timeout: float | None = None,
    ) -> TaskResult:
        """Run a prompt to completion and return the answer text."""
        timeout = timeout or self.default_timeout
        args = self.build_args(
            prompt,
            output_format=output_format,
            allowed_tools=allowed_tools,
            max_turns=max_turns,
            resume=resume,
            system_prompt=system_prompt,
        )
        proc = await self._spawn(args)
        try:
            stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await self.registry.stop(proc)
            logger.warning("Assistant call timed out after %.0fs", timeout)
            raise AssistantTimeoutError(f"Assistant request timed out after {timeout:.0f}s")
        finally:
            if proc.returncode is None:
                await self.registry.stop(proc)
            self.registry.discard(proc)

        stdout = stdout_b.decode("utf-8", errors="replace").strip()
        stderr = stderr_b.decode("utf-8", errors="replace").strip()
        if proc.returncode != 0:
            raise AssistantFailedError(
                f"Assistant exited with code {proc.returncode}: {stderr or stdout}",
                exit_code=proc.returncode,
                stderr=stderr,
            )
        if output_format != "json":
            return TaskResult(text=stdout)
        try:
            parsed = json.loads(stdout)
        except json.JSONDecodeError:
            return TaskResult(text=stdout)
        if not isinstance(parsed, dict):
            return TaskResult(text=stdout)
        if parsed.get("is_error"):
            raise AssistantFailedError(str(parsed.get("result") or "Unknown assistant error"))
        result = parsed.get("result")
        return TaskResult(
            text=result if isinstance(result, str) else stdout,
            session_id=parsed.get("session_id"),
        )

    async def run_task(
        self,
        prompt: str,
        *,
        allowed_tools: list[str] | None = None,
        max_turns: int | None = None,
        resume: str | None = None,
        system_prompt: str | None = None,
        timeout: float | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> TaskResult:
        """Run a long task over the event stream, reporting progress as it happens."""
        timeout = timeout or self.default_timeout
        args = self.build_args(
            prompt,
            output_format="stream-json",
            allowed_tools=allowed_tools,
            max_turns=max_turns,
            resume=resume,
            system_prompt=system_prompt,
        )
        proc = await self._spawn(args)
        loop = asyncio.get_running_loop()
        started = loop.time()
        last_progress = started
        parser = StreamParser()
        raw_lines: list[str] = []
        stderr_parts: list[str] = []

        def emit(event: ProgressEvent) -> None:
            nonlocal last_progress
            last_progress = loop.time()
            if on_progress is not None:
                on_progress(event)

        async def read_stdout() -> None:
            assert proc.stdout is not None
            async for raw in proc.stdout:
                line = raw.decode("utf-8", errors="replace")
                raw_lines.append(line)
                for event in parser.feed_line(line):
                    emit(event)

        async def read_stderr() -> None:
            assert proc.stderr is not None
            data = await proc.stderr.read()
            stderr_parts.append(data.decode("utf-8", errors="replace"))

        async def heartbeat() -> None:
            while True:
                await asyncio.sleep(self.heartbeat_interval)
                now = loop.time()
                if on_progress is not None and now - last_progress >= self.heartbeat_interval:
                    on_progress(
                        ProgressEvent(
                            kind="status",
                            tool="status",
                            message=f"Researching... ({format_elapsed(now - started)} elapsed)",
                            search_count=parser.search_count,
                            total_sources=len(parser.sources),
                        )
                    )

        ticker = asyncio.create_task(heartbeat())
        try:
            await asyncio.wait_for(
                asyncio.gather(read_stdout(), read_stderr(), proc.wait()),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            await self.registry.stop(proc)
            logger.warning("Assistant task timed out after %.0fs (pid=%s)", timeout, proc.pid)
            raise AssistantTimeoutError(f"Assistant request timed out after {timeout:.0f}s")
        finally:
            ticker.cancel()
            if proc.returncode is None:
                await self.registry.stop(proc)
            self.registry.discard(proc)

        stderr = "".join(stderr_parts).strip()
        final = parser.final_result
        if proc.returncode != 0 and not final:
            raise AssistantFailedError(
                f"Assistant exited with code {proc.returncode}: {stderr}",
                exit_code=proc.returncode,
                stderr=stderr,
            )
        if final and parser.is_error:
            raise AssistantFailedError(final, exit_code=proc.returncode, stderr=stderr)
        text = final if final else "".join(raw_lines).strip()
        return TaskResult(
            text=text,
            session_id=parser.session_id,
            search_count=parser.search_count,
            sources=list(parser.sources),
        )

    async def follow_up(
        self,
        session_id: str,
        question: str,
        *,
        allowed_tools: list[str] | None = None,
        timeout: float | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> TaskResult:
        """Ask a question inside an earlier session."""
        return await self.run_task(
            question,
            allowed_tools=allowed_tools,
            resume=session_id,
            timeout=timeout,
            on_progress=on_progress,
        )


_default_runner: AssistantRunner | None = None


def get_runner() -> AssistantRunner:
    """Process-wide runner built from the loaded settings."""
    global _default_runner
    if _default_runner is None:
        from saasfactory.core.settings import load_settings

        _default_runner = AssistantRunner.from_settings(load_settings())
    return _default_runner


def set_runner(runner: AssistantRunner | None) -> None:
    """Replace the process-wide runner (None resets it to the settings-built one)."""
    global _default_runner
    _default_runner = runner


async def is_assistant_available() -> bool:
    return await get_runner().is_available()


async def run_external_task(prompt: str, **options: Any) -> TaskResult:
    return await get_runner().run_task(prompt, **options)
