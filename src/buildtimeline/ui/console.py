"""Console output formatting utilities for buildtimeline."""

from __future__ import annotations

import sys
import traceback
from typing import Iterable, Optional

from ..model import Component, Pipeline, Status

STATUS_MARKS = {
    Status.IDLE: "·",
    Status.QUEUED: "…",
    Status.RUNNING: "▶",
    Status.SUCCEEDED: "✓",
    Status.FAILED: "✗",
    Status.UNSTABLE: "!",
    Status.CANCELLED: "⊘",
    Status.DISABLED: "-",
}


class Console:
    """
    Terminal rendering of views plus the diagnostics channel.

    Results go to stdout; errors, warnings and debug lines to stderr.
    `debug` enables debug lines and full tracebacks.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_components(self, components: Iterable[Component]) -> None:
        """Print every component with its pipelines."""
        for component in components:
            self.print_header(f"{component.number}. {component.name} ({component.first_job})")
            if not component.pipelines:
                print("  (no pipelines)")
            for pipeline in component.pipelines:
                self.print_pipeline(pipeline)
            if component.pagination is not None:
                p = component.pagination
                nav = ("< " if p.has_previous else "") + (">" if p.has_next else "")
                print(f"  page {p.page}/{p.total_pages} ({p.total_builds} builds) {nav}".rstrip())

    def print_pipeline(self, pipeline: Pipeline) -> None:
        """Print one pipeline as a single line of stages."""
        label = "aggregated" if pipeline.aggregated else (pipeline.version or "not built")
        stages = "  ".join(
            f"{STATUS_MARKS.get(stage.status, '?')} {stage.name}" for stage in pipeline.stages
        )
        print(f"  {label:<12} {stages}")
        if pipeline.triggered_by:
            print(f"  {'':<12} triggered by: {', '.join(pipeline.triggered_by)}")
        for change in pipeline.changes:
            print(f"  {'':<12} {change.commit_id[:8]} {change.author}: {change.message}")

    def print_items(self, names: Iterable[str]) -> None:
        """Print the job names covered by a view."""
        for name in sorted(names):
            print(f"  {name}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """`title` on its own line, then the message, indented details and a hint."""
        lines = [f"\nERROR: {title}", message]
        lines.extend(f"  {d}" for d in details or ())
        if suggestion:
            lines.append(f"\n{suggestion}")
        self._err("\n".join(lines))

    def print_warning(self, message: str) -> None:
        """Print a warning; the read carries on."""
        self._err(f"WARNING: {message}")

    def print_exception(self, exc: BaseException) -> None:
        # tracebacks are for --debug only
        if self.debug:
            self._err("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip())
        else:
            self._err(f"{type(exc).__name__}: {exc}")

    def print_info(self, message: str) -> None:
        print(message)

    def print_debug(self, message: str) -> None:
        if self.debug:
            self._err(f"[debug] {message}")

    @staticmethod
    def _err(text: str) -> None:
        print(text, file=sys.stderr)


_console: Optional[Console] = None


def get_console() -> Console:
    """The process-wide console; a quiet one until the CLI installs its own."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    global _console
    _console = console
