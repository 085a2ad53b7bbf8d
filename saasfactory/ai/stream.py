"""Parser for the assistant's line-delimited JSON event stream."""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(r"https?://[^\s\"<>]+")

ProgressKind = Literal["search", "sources", "status", "final"]


@dataclass
class ProgressEvent:
    """One classified progress update handed to on_progress callbacks."""

    kind: ProgressKind
    message: str
    tool: str | None = None
    query: str | None = None
    sources: list[str] = field(default_factory=list)
    search_count: int = 0
    total_sources: int = 0


def hostname(url: str) -> str | None:
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def extract_domains(content: str) -> list[str]:
    """Hostnames from a tool_result body: a JSON list of {url} or free text with URLs."""
    urls: list[str] = []
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        parsed = None
    if isinstance(parsed, list):
        urls = [r["url"] for r in parsed if isinstance(r, dict) and isinstance(r.get("url"), str)]
    else:
        urls = _URL_PATTERN.findall(content or "")
    out: list[str] = []
    for url in urls:
        host = hostname(url)
        if host and host not in out:
            out.append(host)
    return out


class StreamParser:
    """Classifies stream events for one task and tracks task-wide counters.

    Source hostnames are deduplicated across the whole task: a later tool
    result only reports domains that have not been seen before.
    """

    def __init__(self, search_tools: tuple[str, ...] = ("WebSearch",)) -> None:
        self.search_tools = search_tools
        self.search_count = 0
        self.sources: list[str] = []
        self.final_result: str | None = None
        self.session_id: str | None = None
        self.is_error = False

    def feed_line(self, line: str) -> list[ProgressEvent]:
        """Parse one output line. Non-JSON lines are ignored."""
        line = line.strip()
        if not line:
            return []
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping non-JSON stream line: %.80s", line)
            return []
        if not isinstance(event, dict):
            return []
        return self.feed_event(event)

    def feed_event(self, event: dict[str, Any]) -> list[ProgressEvent]:
        if isinstance(event.get("session_id"), str):
            self.session_id = event["session_id"]

        etype = event.get("type")
        if etype == "assistant":
            return self._on_assistant(event)
        if etype == "user":
            return self._on_tool_result(event)
        if etype == "result":
            result = event.get("result")
            if isinstance(result, str) and result:
                self.final_result = result
                self.is_error = bool(event.get("is_error"))
                return [
                    ProgressEvent(
                        kind="final",
                        message="Research complete",
                        search_count=self.search_count,
                        total_sources=len(self.sources),
                    )
                ]
        return []

    def _content_blocks(self, event: dict[str, Any]) -> list[dict[str, Any]]:
        message = event.get("message")
        if not isinstance(message, dict):
            return []
        content = message.get("content")
        if not isinstance(content, list):
            return []
        return [c for c in content if isinstance(c, dict)]

    def _on_assistant(self, event: dict[str, Any]) -> list[ProgressEvent]:
        out: list[ProgressEvent] = []
        for block in self._content_blocks(event):
            if block.get("type") != "tool_use":
                continue
            name = block.get("name")
            tool_input = block.get("input") if isinstance(block.get("input"), dict) else {}
            if name in self.search_tools:
                self.search_count += 1
                query = tool_input.get("query") if isinstance(tool_input.get("query"), str) else None
                out.append(
                    ProgressEvent(
                        kind="search",
                        tool=name,
                        query=query,
                        message=f'Searching: "{query}"' if query else f"Web search #{self.search_count}",
                        search_count=self.search_count,
                        total_sources=len(self.sources),
                    )
                )
            elif isinstance(name, str):
                out.append(
                    ProgressEvent(
                        kind="status",
                        tool=name,
                        message=f"Using {name}...",
                        search_count=self.search_count,
                        total_sources=len(self.sources),
                    )
                )
        return out

    def _on_tool_result(self, event: dict[str, Any]) -> list[ProgressEvent]:
        domains: list[str] = []
        structured = event.get("tool_use_result")
        if isinstance(structured, dict) and isinstance(structured.get("results"), list):
            for result in structured["results"]:
                if not isinstance(result, dict) or not isinstance(result.get("content"), list):
                    continue
                for item in result["content"]:
                    if isinstance(item, dict) and isinstance(item.get("url"), str):
                        host = hostname(item["url"])
                        if host and host not in domains:
                            domains.append(host)

        if not domains:
            for block in self._content_blocks(event):
                if block.get("type") == "tool_result" and isinstance(block.get("content"), str):
                    for host in extract_domains(block["content"]):
                        if host not in domains:
                            domains.append(host)

        new = [d for d in domains if d not in self.sources]
        if not new:
            return []
        self.sources.extend(new)
        return [
            ProgressEvent(
                kind="sources",
                sources=new,
                message=f"Found {len(new)} sources",
                search_count=self.search_count,
                total_sources=len(self.sources),
            )
        ]
