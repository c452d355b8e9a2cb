# resolvers.py
from __future__ import annotations

from typing import Iterable, List

from .model import ConditionalStep, Job, TriggerStep
from .registry import JobRegistry


class EdgeResolver:
    """
    Strategy returning the jobs directly downstream of `job`.

    Implementations must be pure: no side effects, safe to call repeatedly
    and from several threads for the same job.
    """

    name = "resolver"

    def resolve(self, job: Job, registry: JobRegistry) -> List[Job]:
        raise NotImplementedError


def _lookup_all(names: Iterable[str], registry: JobRegistry) -> List[Job]:
    out: List[Job] = []
    for name in names:
        found = registry.find_job(name)
        if found is not None:
            out.append(found)
    return out


class ManualTriggerResolver(EdgeResolver):
    """Downstream jobs that wait for a manual trigger."""

    name = "manual"

    def resolve(self, job: Job, registry: JobRegistry) -> List[Job]:
        return _lookup_all(job.manual_downstream, registry)


class TriggerBuilderResolver(EdgeResolver):
    """Jobs called from the job's own 'trigger other projects' build steps."""

    name = "trigger-builder"

    def resolve(self, job: Job, registry: JobRegistry) -> List[Job]:
        names: List[str] = []
        for step in job.build_steps:
            if isinstance(step, TriggerStep):
                names.extend(step.project_names())
        return _lookup_all(names, registry)


class DownstreamLinkResolver(EdgeResolver):
    """Native downstream links declared on the job."""

    name = "downstream"

    def resolve(self, job: Job, registry: JobRegistry) -> List[Job]:
        return list(registry.downstream_links_of(job))


# ---------------------------------------------------------------------
# Process-wide registry (registration order == query order)
# ---------------------------------------------------------------------

_RESOLVERS: List[EdgeResolver] = []


def register_resolver(resolver: EdgeResolver) -> EdgeResolver:
    _RESOLVERS.append(resolver)
    return resolver


def all_resolvers() -> List[EdgeResolver]:
    return list(_RESOLVERS)


def reset_resolvers() -> None:
    """Restore the default resolver list."""
    _RESOLVERS.clear()
    register_resolver(ManualTriggerResolver())
    register_resolver(TriggerBuilderResolver())
    # native links last: the post-build reordering pops them off the tail
    register_resolver(DownstreamLinkResolver())


reset_resolvers()


# ---------------------------------------------------------------------
# Post-build automation steps
# ---------------------------------------------------------------------

def _trigger_steps(steps: Iterable) -> List[TriggerStep]:
    found: List[TriggerStep] = []
    for step in steps:
        if isinstance(step, ConditionalStep):
            # one level only: triggers enclosed in a conditional step
            found.extend(s for s in step.steps if isinstance(s, TriggerStep))
        elif isinstance(step, TriggerStep):
            found.append(step)
    return found


def post_build_jobs(job: Job, registry: JobRegistry) -> List[Job]:
    """Jobs triggered from post-build steps, kept only on an exact full-name match."""
    out: List[Job] = []
    for step in _trigger_steps(job.post_build_steps):
        for name in step.project_names():
            found = registry.find_job(name)
            if found is not None and found.name == name:
                out.append(found)
    return out


def downstream_jobs(
    job: Job,
    registry: JobRegistry,
    resolvers: List[EdgeResolver] | None = None,
) -> List[Job]:
    """
    Merged, de-duplicated downstream jobs of `job`.

    Jobs discovered from post-build steps are listed before the job's own
    declared downstream links; the declared links keep their mutual order.
    """
    resolvers = all_resolvers() if resolvers is None else resolvers

    result: List[Job] = []
    for resolver in resolvers:
        result.extend(resolver.resolve(job, registry))

    # set the native links aside (popped off the tail, so in reverse)
    set_aside: List[Job] = []
    for _ in range(min(len(registry.downstream_links_of(job)), len(result))):
        set_aside.append(result.pop())

    result.extend(post_build_jobs(job, registry))

    set_aside.reverse()
    result.extend(set_aside)

    seen: set[str] = set()
    unique: List[Job] = []
    for j in result:
        if j.name not in seen:
            seen.add(j.name)
            unique.append(j)
    return unique
