# view.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Set

from .config import ComponentSpec, RegexSpec, ViewSettings
from .errors import PatternValidationError, PipelineResolutionError, UnresolvedJobError
from .graph import resolve_graph
from .matching import match_components
from .model import Component, Job, Pipeline
from .pipeline import PipelineAssembler
from .registry import JobRegistry
from .resolvers import EdgeResolver
from .sort import sort_components
from .triggers import trigger_manual, trigger_rebuild
from .ui.console import get_console


class TimelineView:
    """
    A configured view over a job registry.

    `pipelines()` is the read operation: it resolves every configured
    component from scratch, sorts and trims them. Nothing is kept between
    reads except the last error message.
    """

    def __init__(
        self,
        name: str,
        registry: JobRegistry,
        settings: ViewSettings | None = None,
        component_specs: Optional[List[ComponentSpec]] = None,
        regex_specs: Optional[List[RegexSpec]] = None,
        *,
        resolvers: List[EdgeResolver] | None = None,
        context: str | None = None,
    ):
        self.name = name
        self.registry = registry
        self.settings = settings or ViewSettings()
        self.component_specs: List[ComponentSpec] = list(component_specs or [])
        self.regex_specs: List[RegexSpec] = list(regex_specs or [])
        self.resolvers = resolvers
        self.context = context

        self.error: str | None = None
        self.last_updated: datetime | None = None

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _find(self, name: str | None) -> Job | None:
        return self.registry.find_job(name, self.context)

    def pipelines(self, page: int = 1, full_screen: bool = False) -> List[Component]:
        console = get_console()
        self.last_updated = datetime.now(timezone.utc)
        try:
            console.print_debug(f"Getting pipelines for view {self.name!r}")
            components: List[Component] = []

            for number, spec in enumerate(self.component_specs, start=1):
                first = self._find(spec.first_job)
                if first is None:
                    raise UnresolvedJobError(spec.first_job)
                last = None
                if spec.last_job is not None:
                    last = self._find(spec.last_job)
                    if last is None:
                        raise UnresolvedJobError(spec.last_job)
                components.append(self._component(spec.name, first, last, number, page, full_screen))

            for regex in self.regex_specs:
                try:
                    matches = match_components(regex.regexp, self.registry.all_jobs(self.context))
                except PatternValidationError as e:
                    console.print_warning(f"{e} in {regex.regexp!r}")
                    continue
                for number, (name, job) in enumerate(matches.items(), start=1):
                    components.append(self._component(name, job, None, number, page, full_screen))

            components = sort_components(components, self.settings.sorting)

            limit = self.settings.max_visible_components
            if limit > 0:
                console.print_debug(f"Limiting number of components to: {limit}")
                components = components[:limit]

            self.error = None
            return components
        except PipelineResolutionError as e:
            self.error = str(e)
            console.print_debug(f"Pipeline resolution failed: {e}")
            return []

    def _component(
        self,
        name: str,
        first: Job,
        last: Job | None,
        number: int,
        page: int,
        full_screen: bool,
    ) -> Component:
        s = self.settings
        assembler = PipelineAssembler(
            self.registry,
            self.resolvers,
            allow_manual_triggers=s.allow_manual_triggers,
        )
        template = assembler.extract(name, first, last)
        paging = s.paging_enabled and not full_screen

        pipelines: List[Pipeline] = []
        if s.show_aggregated:
            pipelines.append(assembler.build_aggregated(template, s.show_aggregated_changes))
        pipelines.extend(
            assembler.build_latest(
                template,
                s.pipeline_count,
                paging_enabled=paging,
                show_changes=s.show_changes,
                max_pages=s.max_pages,
                page=page,
            )
        )

        return Component(
            name=name,
            number=number,
            first_job=first.name,
            first_job_url=first.url,
            first_job_parameterized=first.parameterized,
            pipelines=tuple(pipelines),
            pagination=assembler.pagination(template, s.pipeline_count, paging, s.max_pages, page),
        )

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def items(self) -> Set[str]:
        """Names of every job shown by this view."""
        names: Set[str] = set()
        for spec in self.component_specs:
            first = self._find(spec.first_job)
            last = self._find(spec.last_job)
            # a component that cannot be resolved shows no jobs
            if first is None or (spec.last_job is not None and last is None):
                continue
            names.update(resolve_graph(first, last, self.registry, self.resolvers).names())
        for regex in self.regex_specs:
            try:
                matches = match_components(regex.regexp, self.registry.all_jobs(self.context))
            except PatternValidationError:
                continue
            names.update(j.name for j in matches.values())
        return names

    def contains(self, name: str) -> bool:
        return name in self.items()

    def on_job_renamed(self, old_name: str, new_name: str | None) -> None:
        """Follow a rename; `new_name=None` means the job was deleted and its components go."""
        kept: List[ComponentSpec] = []
        for spec in self.component_specs:
            if spec.first_job == old_name:
                if new_name is None:
                    continue
                spec = spec.model_copy(update={"first_job": new_name})
            if spec.last_job is not None and spec.last_job == old_name:
                if new_name is None:
                    continue
                spec = spec.model_copy(update={"last_job": new_name})
            kept.append(spec)
        self.component_specs = kept

    # ------------------------------------------------------------------
    # Manual triggers
    # ------------------------------------------------------------------

    def trigger_manual(self, project: str, upstream: str, build_id: str, user: str | None = None) -> None:
        trigger_manual(self.registry, project, upstream, build_id, user=user, context=self.context)

    def trigger_rebuild(self, project: str, build_id: str, user: str | None = None) -> None:
        trigger_rebuild(self.registry, project, build_id, user=user, context=self.context)
