# src/buildtimeline/dsl.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .model import Build, BuildStep, Cause, Change, ConditionalStep, Job, QueueItem, Status, TriggerStep
from .registry import InMemoryRegistry

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

UpstreamRef = Tuple[str, int]


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def trigger(*projects: str) -> TriggerStep:
    """A 'call builds on other projects' step."""
    return TriggerStep(projects=", ".join(projects))


def conditional(*steps: BuildStep) -> ConditionalStep:
    """A conditional step wrapping other steps."""
    return ConditionalStep(steps=tuple(steps))


# ---------------------------------------------------------------------
# Build helper
# ---------------------------------------------------------------------

def _upstream_list(upstream: Union[UpstreamRef, Sequence[UpstreamRef], None]) -> List[UpstreamRef]:
    if upstream is None:
        return []
    if len(upstream) == 2 and isinstance(upstream[0], str):
        return [upstream]  # a single (job, number) pair
    return list(upstream)


def build(
    number: int,
    status: Union[Status, str] = Status.SUCCEEDED,
    *,
    started: Optional[datetime] = None,
    duration: float = 0.0,
    upstream: Union[UpstreamRef, Sequence[UpstreamRef], None] = None,
    user: Optional[str] = None,
    scm: bool = False,
    parameters: Optional[Dict[str, str]] = None,
    changes: Optional[List[Change]] = None,
    url: Optional[str] = None,
) -> Build:
    """
    Create a build.

    `started` defaults to one minute per build number after EPOCH, so a
    higher number is always a later build.
    """
    causes: List[Cause] = [Cause.upstream(j, n) for j, n in _upstream_list(upstream)]
    if user is not None:
        causes.append(Cause.by_user(user))
    if scm:
        causes.append(Cause(kind="scm"))

    return Build(
        number=number,
        status=Status(status),
        timestamp=started or EPOCH + timedelta(minutes=number),
        duration=duration,
        parameters=parameters or {},
        causes=causes,
        changes=changes or [],
        url=url,
    )


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    name: str,
    *builds: Build,
    downstream: Optional[List[str]] = None,
    manual: Optional[List[str]] = None,
    steps: Optional[List[BuildStep]] = None,
    post_build: Optional[List[BuildStep]] = None,
    display_name: Optional[str] = None,
    url: Optional[str] = None,
    parameterized: bool = False,
    disabled: bool = False,
    queued: Union[bool, Sequence[UpstreamRef], None] = None,
) -> Job:
    """
    Create a job. `queued=True` puts it in the queue without causes;
    a list of (job, number) pairs queues it with those upstream causes.
    """
    queue_item = None
    if queued is True:
        queue_item = QueueItem()
    elif queued:
        queue_item = QueueItem(causes=[Cause.upstream(j, n) for j, n in queued])

    return Job(
        name=name,
        display_name=display_name,
        url=url,
        parameterized=parameterized,
        disabled=disabled,
        downstream=list(downstream or []),
        manual_downstream=list(manual or []),
        build_steps=list(steps or []),
        post_build_steps=list(post_build or []),
        builds=list(builds),
        queue_item=queue_item,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._downstream: list[str] = []
        self._manual: list[str] = []
        self._steps: list[BuildStep] = []
        self._post_build: list[BuildStep] = []
        self._builds: list[Build] = []
        self._display_name: Optional[str] = None
        self._url: Optional[str] = None
        self._parameterized = False
        self._disabled = False

    def triggers(self, *job_names: str):
        self._downstream.extend(job_names)
        return self

    def manually_triggers(self, *job_names: str):
        self._manual.extend(job_names)
        return self

    def with_step(self, step: BuildStep):
        self._steps.append(step)
        return self

    def with_post_build(self, step: BuildStep):
        self._post_build.append(step)
        return self

    def with_build(self, *args, **kw):
        self._builds.append(build(*args, **kw))
        return self

    def titled(self, display_name: str):
        self._display_name = display_name
        return self

    def at(self, url: str):
        self._url = url
        return self

    def parameterized(self, enabled: bool = True):
        self._parameterized = enabled
        return self

    def disabled(self, value: bool = True):
        self._disabled = value
        return self

    def build(self) -> Job:
        return job(
            self.name,
            *self._builds,
            downstream=self._downstream,
            manual=self._manual,
            steps=self._steps,
            post_build=self._post_build,
            display_name=self._display_name,
            url=self._url,
            parameterized=self._parameterized,
            disabled=self._disabled,
        )


def define(name: str) -> JobBuilder:
    """Convenience: define('deploy').triggers('smoke').with_build(1).build()"""
    return JobBuilder(name)


def registry(*jobs: Union[Job, JobBuilder], denied: Iterable[str] = ()) -> InMemoryRegistry:
    """In-memory registry from jobs (or unfinished builders)."""
    return InMemoryRegistry(
        (j.build() if isinstance(j, JobBuilder) else j for j in jobs),
        denied=denied,
    )
