from __future__ import annotations

import sys
from datetime import datetime
from typing import Any, Optional, TextIO

from .events import UIEvent


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split())


def _truncate(value: Any, max_len: int = 160) -> str:
    text = _clean_text(value)
    if len(text) <= max_len:
        return text
    return text[: max(0, max_len - 3)] + "..."


def compact_params(params: Any, max_items: int = 4, max_len: int = 140) -> str:
    if not isinstance(params, dict):
        return _truncate(params, max_len)
    parts = []
    for key in list(params.keys())[:max_items]:
        val = params.get(key)
        if isinstance(val, (str, int, float, bool)):
            sval = str(val)
        elif isinstance(val, list):
            sval = f"list[{len(val)}]"
        elif isinstance(val, dict):
            sval = f"dict[{len(val)}]"
        else:
            sval = type(val).__name__
        parts.append(f"{key}={sval}")
    return _truncate(", ".join(parts), max_len)


def _summarize_event(event: UIEvent) -> str:
    name = event.name
    payload = event.payload or {}
    if name == "SERVER_CONNECTED":
        tools = payload.get("tools") or []
        return f"{payload.get('server', '')} tools={len(tools)}".strip()
    if name in ("LLM_CALL_START", "LLM_CALL_END"):
        return f"kind={payload.get('kind', '')}"
    if name == "TOOL_CALL_START":
        tool = payload.get("tool", "")
        params = payload.get("params_compact", "")
        return f"{tool} {params}".strip()
    if name == "TOOL_CALL_END":
        tool = payload.get("tool", "")
        status = payload.get("status", "")
        return f"{tool} status={status}".strip()
    if name == "QUERY_END":
        return f"tool_calls={payload.get('tool_calls', 0)}"
    return ""


def _format_plain_line(event: UIEvent) -> str:
    ts = datetime.fromtimestamp(event.ts).strftime("%H:%M:%S")
    summary = _summarize_event(event)
    return f"{ts} {event.name} {summary}".rstrip()


class Reporter:
    ui_debug: bool = False

    def emit(self, event: UIEvent) -> None:
        pass

    def close(self) -> None:
        pass


class NullReporter(Reporter):
    def emit(self, event: UIEvent) -> None:
        return


class PlainConsoleReporter(Reporter):
    """Writes one line per event to stderr so stdout carries only answers."""

    _quiet = {"LLM_CALL_START", "LLM_CALL_END"}

    def __init__(self, *, ui_debug: bool = False, stream: Optional[TextIO] = None):
        self.ui_debug = ui_debug
        self._stream = stream

    def emit(self, event: UIEvent) -> None:
        if event.name in self._quiet and not self.ui_debug:
            return
        stream = self._stream or sys.stderr
        print(_format_plain_line(event), file=stream, flush=True)


class RichConsoleReporter(Reporter):
    _styles = {
        "tool": "cyan",
        "llm": "magenta",
        "server": "green",
        "query": "dim",
    }

    def __init__(self, *, ui_debug: bool = False, console: Any = None) -> None:
        from rich.console import Console

        self.ui_debug = ui_debug
        self._console = console or Console(stderr=True)

    def emit(self, event: UIEvent) -> None:
        if event.category == "llm" and not self.ui_debug:
            return
        from rich.text import Text

        style = self._styles.get(event.category, "")
        if event.level in ("warning", "error"):
            style = "bold red" if event.level == "error" else "yellow"
        line = Text()
        line.append(datetime.fromtimestamp(event.ts).strftime("%H:%M:%S "), style="dim")
        line.append(event.name, style=style)
        summary = _summarize_event(event)
        if summary:
            line.append(" " + summary)
        self._console.print(line)


def create_reporter(
    ui_mode: str,
    *,
    ui_debug: bool = False,
    is_tty: Optional[bool] = None,
) -> Reporter:
    if is_tty is None:
        is_tty = sys.stderr.isatty()
    mode = ui_mode
    if mode == "rich" and not is_tty:
        mode = "plain"
    if mode == "off":
        return NullReporter()
    if mode == "plain":
        return PlainConsoleReporter(ui_debug=ui_debug)
    if mode == "rich":
        return RichConsoleReporter(ui_debug=ui_debug)
    raise ValueError(f"Unknown ui mode: {ui_mode}")


__all__ = [
    "Reporter",
    "NullReporter",
    "PlainConsoleReporter",
    "RichConsoleReporter",
    "create_reporter",
    "compact_params",
]
