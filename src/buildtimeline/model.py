# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class Status(str, Enum):
    """Status of a single task (one build attempt of one job)."""
    IDLE = "idle"
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    UNSTABLE = "unstable"
    CANCELLED = "cancelled"
    DISABLED = "disabled"

    @property
    def is_failed(self) -> bool:
        return self is Status.FAILED


# ---------------------------------------------------------------------
# Host side: jobs and their build history
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Cause:
    """Why a build (or queue item) was started."""
    kind: str  # "upstream" | "user" | "scm" | "timer"
    upstream_job: str | None = None
    upstream_build: int | None = None
    user: str | None = None

    @classmethod
    def upstream(cls, job_name: str, build_number: int) -> Cause:
        return cls(kind="upstream", upstream_job=job_name, upstream_build=build_number)

    @classmethod
    def by_user(cls, user: str | None = None) -> Cause:
        return cls(kind="user", user=user or "anonymous")

    @property
    def is_upstream(self) -> bool:
        return self.kind == "upstream"

    @property
    def description(self) -> str:
        if self.kind == "upstream":
            return f"upstream project {self.upstream_job} build #{self.upstream_build}"
        if self.kind == "user":
            return f"{self.user}"
        if self.kind == "scm":
            return "SCM change"
        if self.kind == "timer":
            return "timer"
        return self.kind


@dataclass(frozen=True)
class Change:
    """A single SCM change that went into a build."""
    commit_id: str
    author: str
    message: str


@dataclass
class Build:
    """One build of a job, as recorded by the host."""
    number: int
    status: Status
    timestamp: datetime
    duration: float = 0.0  # seconds
    parameters: Dict[str, str] = field(default_factory=dict)
    causes: List[Cause] = field(default_factory=list)
    changes: List[Change] = field(default_factory=list)
    url: str | None = None

    @property
    def upstream_causes(self) -> List[Cause]:
        return [c for c in self.causes if c.is_upstream]


@dataclass(frozen=True)
class TriggerStep:
    """'Call builds on other projects' step; projects is a comma separated list."""
    projects: str

    def project_names(self) -> List[str]:
        # whitespace is never part of a job name here
        return [p for p in "".join(self.projects.split()).split(",") if p]


@dataclass(frozen=True)
class ConditionalStep:
    """A conditional build step wrapping one or more nested steps."""
    steps: Tuple[BuildStep, ...] = ()


BuildStep = Union[TriggerStep, ConditionalStep]


@dataclass
class QueueItem:
    """A pending build of a job sitting in the host queue."""
    causes: List[Cause] = field(default_factory=list)


@dataclass
class Job:
    """
    A build job known to the host registry.

    Identity is `name` (the full name, e.g. "folder/deploy").
    `builds` is kept newest first.
    """
    name: str
    display_name: str | None = None
    url: str | None = None
    parameterized: bool = False
    disabled: bool = False

    # Native downstream links ("build other projects")
    downstream: List[str] = field(default_factory=list)
    # Downstream jobs that wait for a manual trigger from this job
    manual_downstream: List[str] = field(default_factory=list)

    build_steps: List[BuildStep] = field(default_factory=list)
    post_build_steps: List[BuildStep] = field(default_factory=list)

    builds: List[Build] = field(default_factory=list)
    queue_item: Optional[QueueItem] = None

    def __post_init__(self) -> None:
        self.builds = sorted(self.builds, key=lambda b: b.number, reverse=True)

    @property
    def title(self) -> str:
        return self.display_name or self.name.rsplit("/", 1)[-1]

    @property
    def last_build(self) -> Build | None:
        return self.builds[0] if self.builds else None

    @property
    def next_build_number(self) -> int:
        return self.builds[0].number + 1 if self.builds else 1

    def recent_builds(self, n: int) -> List[Build]:
        return self.builds[: max(n, 0)]

    def get_build(self, number: int) -> Build | None:
        for b in self.builds:
            if b.number == number:
                return b
        return None


# ---------------------------------------------------------------------
# Derived view objects (rebuilt on every read)
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ManualStep:
    """Manual-trigger affordance on a task that has not run yet."""
    upstream: str
    upstream_id: str | None
    enabled: bool


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    status: Status
    build_number: int | None = None
    timestamp: datetime | None = None
    duration: float = 0.0
    link: str | None = None
    manual: ManualStep | None = None


@dataclass(frozen=True)
class Stage:
    job: str
    name: str
    column: int
    tasks: Tuple[Task, ...]
    downstream: Tuple[str, ...] = ()
    changes: Tuple[Change, ...] = ()

    @property
    def status(self) -> Status:
        return self.tasks[0].status if self.tasks else Status.IDLE


@dataclass(frozen=True)
class Pipeline:
    name: str
    stages: Tuple[Stage, ...]
    version: str | None = None
    aggregated: bool = False
    triggered_by: Tuple[str, ...] = ()
    timestamp: datetime | None = None
    changes: Tuple[Change, ...] = ()

    @property
    def tasks(self) -> List[Task]:
        return [t for s in self.stages for t in s.tasks]

    @property
    def total_build_time(self) -> float:
        return sum(t.duration for t in self.tasks if t.build_number is not None)

    @property
    def has_failed(self) -> bool:
        return any(t.status.is_failed for t in self.tasks)

    @property
    def latest_activity(self) -> datetime | None:
        stamps = [t.timestamp for t in self.tasks if t.timestamp is not None]
        return max(stamps) if stamps else None


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int
    total_builds: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


@dataclass(frozen=True)
class Component:
    """A named group of pipelines, one per configured first job."""
    name: str
    number: int
    first_job: str
    first_job_url: str | None
    first_job_parameterized: bool
    pipelines: Tuple[Pipeline, ...] = ()
    pagination: Pagination | None = None

    @property
    def first_pipeline(self) -> Pipeline | None:
        return self.pipelines[0] if self.pipelines else None
