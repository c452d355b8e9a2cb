# triggers.py
from __future__ import annotations

from typing import List, Optional

from .errors import AuthorizationError, TriggerError, TriggerNotFoundError, UnresolvedJobError
from .model import Cause, Job
from .registry import JobRegistry
from .ui.console import get_console


class ManualTrigger:
    """Strategy that knows how to start `project` manually from `upstream`."""

    def handles(self, project: Job, upstream: Job) -> bool:
        raise NotImplementedError

    def trigger(
        self,
        registry: JobRegistry,
        project: Job,
        upstream: Job,
        build_id: str,
        user: str | None = None,
    ) -> None:
        raise NotImplementedError


class ManualDownstreamTrigger(ManualTrigger):
    """Starts a job listed in its upstream's manual downstream jobs."""

    def handles(self, project: Job, upstream: Job) -> bool:
        return project.name in upstream.manual_downstream

    def trigger(
        self,
        registry: JobRegistry,
        project: Job,
        upstream: Job,
        build_id: str,
        user: str | None = None,
    ) -> None:
        try:
            number = int(build_id)
        except ValueError as e:
            raise TriggerError(f"Invalid build id: {build_id!r}", project=project.name) from e

        upstream_build = upstream.get_build(number)
        if upstream_build is None:
            raise TriggerError(
                f"Upstream build {upstream.name} #{number} not found",
                project=project.name,
                upstream=upstream.name,
            )

        registry.schedule(
            project,
            [Cause.upstream(upstream.name, number), Cause.by_user(user)],
            dict(upstream_build.parameters),
        )


_TRIGGERS: List[ManualTrigger] = [ManualDownstreamTrigger()]


def register_trigger(trigger: ManualTrigger) -> ManualTrigger:
    _TRIGGERS.append(trigger)
    return trigger


def manual_trigger_for(project: Job, upstream: Job) -> Optional[ManualTrigger]:
    for trigger in _TRIGGERS:
        if trigger.handles(project, upstream):
            return trigger
    return None


def without_folder_prefix(project_name: str) -> str:
    return project_name[project_name.index("/") + 1:]


def trigger_exception_message(project_name: str, upstream_name: str, build_id: str) -> str:
    message = f"Could not trigger manual build {project_name} for upstream {upstream_name} id: {build_id}"
    if "/" in project_name:
        message += f". Did you mean to specify {without_folder_prefix(project_name)}?"
    return message


def _require(registry: JobRegistry, name: str, context: str | None) -> Job:
    job = registry.find_job(name, context)
    if job is None:
        raise UnresolvedJobError(name)
    return job


def trigger_manual(
    registry: JobRegistry,
    project_name: str,
    upstream_name: str,
    build_id: str,
    *,
    user: str | None = None,
    context: str | None = None,
) -> None:
    """
    Start `project_name` manually for build `build_id` of `upstream_name`.

    Fire and forget: the request is handed to the scheduler and not tracked.
    """
    console = get_console()
    console.print_debug(f"Trigger manual build {project_name} {upstream_name} {build_id}")

    project = _require(registry, project_name, context)
    if not registry.has_permission(project, "build"):
        raise AuthorizationError(project.name)
    upstream = _require(registry, upstream_name, context)

    try:
        trigger = manual_trigger_for(project, upstream)
        if trigger is None:
            err = TriggerNotFoundError(project_name, upstream_name, build_id)
            console.print_warning(str(err))
            raise err
        trigger.trigger(registry, project, upstream, build_id, user)
    except TriggerError:
        console.print_warning(trigger_exception_message(project_name, upstream_name, build_id))
        raise


def trigger_rebuild(
    registry: JobRegistry,
    project_name: str,
    build_id: str,
    *,
    user: str | None = None,
    context: str | None = None,
) -> None:
    """Schedule `project_name` again with the causes and parameters of build `build_id`."""
    project = _require(registry, project_name, context)
    if not registry.has_permission(project, "build"):
        raise AuthorizationError(project.name)

    try:
        build = project.get_build(int(build_id))
    except ValueError as e:
        raise TriggerError(f"Invalid build id: {build_id!r}", project=project.name) from e
    if build is None:
        raise TriggerError(f"Build {project.name} #{build_id} not found", project=project.name)

    causes = [c for c in build.causes if c.kind != "user"]
    causes.append(Cause.by_user(user))
    registry.schedule(project, causes, dict(build.parameters))
