# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(eq=False)
class TimelineError(Exception):
    """
    Structured error with enough context for:
      - a single human readable line in the view (`str(err)`)
      - CLI / API rendering of the details
    """
    kind: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class PipelineResolutionError(TimelineError):
    """Raised while turning configuration into components."""


class UnresolvedJobError(PipelineResolutionError):
    def __init__(self, name: str):
        super().__init__(
            kind="unresolved_job",
            message=f"Could not find project: {name}",
            details={"name": name},
        )
        self.name = name


class PatternValidationError(TimelineError, ValueError):
    def __init__(self, pattern: str, reason: str):
        super().__init__(
            kind="pattern",
            message=reason,
            details={"pattern": pattern},
        )
        self.pattern = pattern


class TriggerError(TimelineError):
    """A manual trigger could not be carried out."""

    def __init__(self, message: str, **details):
        super().__init__(kind="trigger", message=message, details=details)


class TriggerNotFoundError(TriggerError):
    def __init__(self, project: str, upstream: str, build_id: str):
        super().__init__(
            f"Trigger not found for manual build {project} for upstream {upstream} id: {build_id}",
            project=project,
            upstream=upstream,
            build_id=build_id,
        )


class AuthorizationError(TimelineError):
    def __init__(self, project: str, permission: str = "build"):
        super().__init__(
            kind="authorization",
            message=f"Not authorized to {permission} {project}",
            details={"project": project, "permission": permission},
        )
