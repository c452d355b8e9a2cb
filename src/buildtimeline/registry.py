# registry.py
from __future__ import annotations

from typing import Dict, Iterable, List, Set

from .model import Build, Cause, Job, QueueItem, Status


class JobRegistry:
    """
    What the engine needs from the host: job lookup, queue state,
    native downstream links and permissions.

    Subclass this to plug in a real CI host. Every method is read-only
    except `schedule`, which hands a build request to the host scheduler.
    """

    def find_job(self, name: str | None, context: str | None = None) -> Job | None:
        raise NotImplementedError

    def all_jobs(self, context: str | None = None) -> List[Job]:
        raise NotImplementedError

    def downstream_links_of(self, job: Job) -> List[Job]:
        raise NotImplementedError

    def is_in_queue(self, job: Job) -> bool:
        return job.queue_item is not None

    def queue_causes(self, job: Job) -> List[Cause]:
        return list(job.queue_item.causes) if job.queue_item else []

    def get_build(self, job_name: str, number: int) -> Build | None:
        job = self.find_job(job_name)
        return job.get_build(number) if job else None

    def has_permission(self, job: Job, permission: str = "build") -> bool:
        return True

    def schedule(self, job: Job, causes: List[Cause], parameters: Dict[str, str]) -> None:
        raise NotImplementedError


class InMemoryRegistry(JobRegistry):
    """Registry backed by a dict of Job objects (tests, timeline files, demos)."""

    def __init__(self, jobs: Iterable[Job] = (), denied: Iterable[str] = ()):
        self._jobs: Dict[str, Job] = {}
        for j in jobs:
            self.add(j)
        self.denied: Set[str] = set(denied)
        # every schedule() call, in order: (job name, causes, parameters)
        self.scheduled: List[tuple] = []

    def add(self, job: Job) -> Job:
        if job.name in self._jobs:
            raise ValueError(f"Duplicate job name: {job.name}")
        self._jobs[job.name] = job
        return job

    def remove(self, name: str) -> None:
        self._jobs.pop(name, None)

    def rename(self, old: str, new: str) -> None:
        job = self._jobs.pop(old)
        job.name = new
        self._jobs[new] = job

    def find_job(self, name: str | None, context: str | None = None) -> Job | None:
        if not name:
            return None
        name = name.strip("/")
        if context:
            nested = self._jobs.get(f"{context.strip('/')}/{name}")
            if nested is not None:
                return nested
        return self._jobs.get(name)

    def all_jobs(self, context: str | None = None) -> List[Job]:
        if not context:
            return list(self._jobs.values())
        prefix = context.strip("/") + "/"
        return [j for n, j in self._jobs.items() if n.startswith(prefix)]

    def downstream_links_of(self, job: Job) -> List[Job]:
        out: List[Job] = []
        for name in job.downstream:
            found = self.find_job(name)
            if found is not None:
                out.append(found)
        return out

    def has_permission(self, job: Job, permission: str = "build") -> bool:
        return job.name not in self.denied

    def schedule(self, job: Job, causes: List[Cause], parameters: Dict[str, str]) -> None:
        self.scheduled.append((job.name, list(causes), dict(parameters)))
        if job.queue_item is None:
            job.queue_item = QueueItem(causes=list(causes))
        else:
            job.queue_item.causes.extend(causes)

    def start_next(self, job: Job, timestamp, **kw) -> Build:
        """Move a queued job into a running build (handy for demos and tests)."""
        causes = self.queue_causes(job)
        b = Build(
            number=job.next_build_number,
            status=Status.RUNNING,
            timestamp=timestamp,
            causes=causes,
            **kw,
        )
        job.builds.insert(0, b)
        job.queue_item = None
        return b
