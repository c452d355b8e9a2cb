# causes.py
"""
Attributing downstream builds to one run of the first job.

A downstream build belongs to a pipeline instance when its recorded
upstream causes lead back, possibly through other builds, to the anchor
build (anchor job name + build number). Everything here is a pure
function over the registry's current state.
"""
from __future__ import annotations

from typing import Collection, List, Set, Tuple

from .model import Build, Cause, Job
from .registry import JobRegistry


def caused_by(
    build: Build,
    anchor_job: str,
    anchor_number: int,
    registry: JobRegistry,
    within: Collection[str] | None = None,
) -> bool:
    """
    True if `build` was (transitively) triggered by build `anchor_number`
    of `anchor_job`.

    When `within` is given, only upstream jobs in that collection are
    followed (e.g. the names of a resolved job graph).
    """
    return _causes_lead_to(build.upstream_causes, anchor_job, anchor_number, registry, within)


def _causes_lead_to(
    causes: List[Cause],
    anchor_job: str,
    anchor_number: int,
    registry: JobRegistry,
    within: Collection[str] | None,
) -> bool:
    seen: Set[Tuple[str, int]] = set()
    pending = [c for c in causes if c.is_upstream]

    while pending:
        cause = pending.pop()
        key = (cause.upstream_job, cause.upstream_build)
        if key in seen:
            continue
        seen.add(key)

        if cause.upstream_job == anchor_job and cause.upstream_build == anchor_number:
            return True
        if within is not None and cause.upstream_job not in within:
            continue

        upstream = registry.get_build(cause.upstream_job, cause.upstream_build)
        if upstream is not None:
            pending.extend(upstream.upstream_causes)

    return False


def attributed_builds(
    job: Job,
    anchor_job: Job,
    anchor: Build,
    registry: JobRegistry,
    within: Collection[str] | None = None,
) -> List[Build]:
    """Builds of `job` belonging to the anchor's pipeline instance, newest first."""
    if job.name == anchor_job.name:
        return [anchor]
    return [b for b in job.builds if caused_by(b, anchor_job.name, anchor.number, registry, within)]


def is_queued(
    job: Job,
    registry: JobRegistry,
    anchor_job: str | None = None,
    anchor_number: int | None = None,
    within: Collection[str] | None = None,
) -> bool:
    """
    True if `job` sits in the queue. With an anchor, the queue item must
    also have been caused by that anchor build (directly or transitively).
    """
    if not registry.is_in_queue(job):
        return False
    if anchor_job is None or anchor_number is None:
        return True
    return _causes_lead_to(registry.queue_causes(job), anchor_job, anchor_number, registry, within)
