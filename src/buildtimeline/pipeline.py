# pipeline.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .causes import attributed_builds, is_queued
from .graph import JobGraph, resolve_graph, stage_columns
from .model import Build, Job, ManualStep, Pagination, Pipeline, Stage, Status, Task
from .registry import JobRegistry
from .resolvers import EdgeResolver

DEFAULT_MAX_PAGES = 5


@dataclass(frozen=True)
class PipelineTemplate:
    """The resolved shape of one component: its job graph and stage layout."""
    name: str
    first: Job
    last: Job | None
    graph: JobGraph
    columns: Dict[str, int]

    def upstreams_of(self, name: str) -> List[Job]:
        return [self.graph[n] for n in self.graph if name in self.graph.downstream_of(n)]


class PipelineAssembler:
    """
    Turns a component's job graph and the jobs' build history into
    Pipeline snapshots.

    Nothing is cached: every call re-reads the registry.
    """

    def __init__(
        self,
        registry: JobRegistry,
        resolvers: List[EdgeResolver] | None = None,
        *,
        allow_manual_triggers: bool = True,
    ):
        self.registry = registry
        self.resolvers = resolvers
        self.allow_manual_triggers = allow_manual_triggers

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    def extract(self, name: str, first: Job, last: Job | None = None) -> PipelineTemplate:
        graph = resolve_graph(first, last, self.registry, self.resolvers)
        return PipelineTemplate(
            name=name,
            first=first,
            last=last,
            graph=graph,
            columns=stage_columns(graph),
        )

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def pagination(
        self,
        template: PipelineTemplate,
        count: int,
        paging_enabled: bool,
        max_pages: int = DEFAULT_MAX_PAGES,
        page: int = 1,
    ) -> Pagination | None:
        """
        Page layout of the first job's history.

        A queued first job takes the first slot of page 1 and the builds
        follow it, so at most `count * max_pages` pipelines are reachable.
        """
        if not paging_enabled or count <= 0:
            return None
        slots = self._queued_slots(template)
        entries = min(len(template.first.builds) + slots, count * max(max_pages, 1))
        total_pages = max(1, math.ceil(entries / count))
        return Pagination(
            page=min(max(page, 1), total_pages),
            page_size=count,
            total_builds=max(entries - slots, 0),
            total_pages=total_pages,
        )

    def _queued_slots(self, template: PipelineTemplate) -> int:
        return 1 if self.registry.is_in_queue(template.first) else 0

    def _select_builds(
        self,
        template: PipelineTemplate,
        count: int,
        paging_enabled: bool,
        max_pages: int,
        page: int,
    ) -> Tuple[bool, List[Build]]:
        """(show the queued pipeline, anchor builds) for the requested page."""
        first = template.first
        slots = self._queued_slots(template)
        paging = self.pagination(template, count, paging_enabled, max_pages, page)
        if paging is None:
            return slots > 0, first.recent_builds(count - slots)
        start = (paging.page - 1) * count
        builds = first.recent_builds(paging.total_builds)
        return slots > 0 and start == 0, builds[max(start - slots, 0): start + count - slots]

    # ------------------------------------------------------------------
    # Per-build pipelines
    # ------------------------------------------------------------------

    def build_latest(
        self,
        template: PipelineTemplate,
        count: int,
        paging_enabled: bool = False,
        show_changes: bool = False,
        max_pages: int = DEFAULT_MAX_PAGES,
        page: int = 1,
    ) -> Iterator[Pipeline]:
        """
        Yield up to `count` pipelines, newest build of the first job first.

        A generator: each call walks the registry again.
        """
        if count <= 0:
            return

        first = template.first
        show_queued, selected = self._select_builds(template, count, paging_enabled, max_pages, page)

        if show_queued:
            yield self._queued_pipeline(template)
        elif not first.builds:
            yield self._idle_pipeline(template)
            return

        for anchor in selected:
            yield self._pipeline_for(template, anchor, show_changes)

    def _pipeline_for(self, template: PipelineTemplate, anchor: Build, show_changes: bool) -> Pipeline:
        first = template.first
        within = template.graph.names()
        attributed: Dict[str, List[Build]] = {
            job.name: attributed_builds(job, first, anchor, self.registry, within)
            for job in template.graph.values()
        }

        stages: List[Stage] = []
        for job in template.graph.values():
            builds = attributed[job.name]
            if builds:
                tasks = tuple(self._task(job, b) for b in builds)
            else:
                queued = is_queued(job, self.registry, first.name, anchor.number, within)
                manual = self._manual_step(template, job, attributed)
                tasks = (self._pending_task(job, queued, manual),)

            stages.append(self._stage(template, job, tasks))

        return Pipeline(
            name=template.name,
            stages=tuple(stages),
            version=f"#{anchor.number}",
            triggered_by=tuple(c.description for c in anchor.causes),
            timestamp=anchor.timestamp,
            changes=tuple(anchor.changes) if show_changes else (),
        )

    def _queued_pipeline(self, template: PipelineTemplate) -> Pipeline:
        stages = []
        for job in template.graph.values():
            task = self._pending_task(job, job.name == template.first.name, None)
            stages.append(self._stage(template, job, (task,)))
        return Pipeline(
            name=template.name,
            stages=tuple(stages),
            version=f"#{template.first.next_build_number}",
            triggered_by=tuple(c.description for c in self.registry.queue_causes(template.first)),
        )

    def _idle_pipeline(self, template: PipelineTemplate) -> Pipeline:
        stages = [
            self._stage(template, job, (self._pending_task(job, False, None),))
            for job in template.graph.values()
        ]
        return Pipeline(name=template.name, stages=tuple(stages))

    def _manual_step(
        self,
        template: PipelineTemplate,
        job: Job,
        attributed: Dict[str, List[Build]],
    ) -> ManualStep | None:
        for upstream in template.upstreams_of(job.name):
            if job.name not in upstream.manual_downstream:
                continue
            builds = attributed.get(upstream.name) or []
            upstream_build: Optional[Build] = builds[0] if builds else None
            return ManualStep(
                upstream=upstream.name,
                upstream_id=str(upstream_build.number) if upstream_build else None,
                enabled=(
                    self.allow_manual_triggers
                    and upstream_build is not None
                    and upstream_build.status is Status.SUCCEEDED
                ),
            )
        return None

    # ------------------------------------------------------------------
    # Aggregated pipeline
    # ------------------------------------------------------------------

    def build_aggregated(self, template: PipelineTemplate, show_changes: bool = False) -> Pipeline:
        """One pipeline showing every stage's newest build, whatever triggered it."""
        stages: List[Stage] = []
        for job in template.graph.values():
            latest = job.last_build
            if latest is not None:
                task = self._task(job, latest)
                changes = tuple(latest.changes) if show_changes else ()
            else:
                task = self._pending_task(job, is_queued(job, self.registry), None)
                changes = ()
            stages.append(self._stage(template, job, (task,), changes))

        return Pipeline(
            name="Aggregated view",
            stages=tuple(stages),
            aggregated=True,
        )

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def _stage(self, template: PipelineTemplate, job: Job, tasks, changes=()) -> Stage:
        return Stage(
            job=job.name,
            name=job.title,
            column=template.columns.get(job.name, 0),
            tasks=tuple(tasks),
            downstream=tuple(template.graph.downstream_of(job.name)),
            changes=tuple(changes),
        )

    @staticmethod
    def _task(job: Job, build: Build) -> Task:
        return Task(
            id=job.name,
            name=job.title,
            status=build.status,
            build_number=build.number,
            timestamp=build.timestamp,
            duration=build.duration,
            link=build.url or job.url,
        )

    @staticmethod
    def _pending_task(job: Job, queued: bool, manual: ManualStep | None) -> Task:
        if queued:
            status = Status.QUEUED
        elif job.disabled:
            status = Status.DISABLED
        else:
            status = Status.IDLE
        return Task(id=job.name, name=job.title, status=status, link=job.url, manual=manual)
