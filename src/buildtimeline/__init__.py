from .model import Build, Cause, Change, Component, Job, Pipeline, Stage, Status, Task
from .dsl import build, conditional, define, job, registry, trigger, JobBuilder
from .config import ComponentSpec, RegexSpec, ViewSettings
from .graph import resolve_graph
from .pipeline import PipelineAssembler
from .view import TimelineView

__all__ = [
    "Build", "Cause", "Change", "Component", "Job", "Pipeline", "Stage", "Status", "Task",
    "build", "conditional", "define", "job", "registry", "trigger", "JobBuilder",
    "ComponentSpec", "RegexSpec", "ViewSettings",
    "resolve_graph", "PipelineAssembler", "TimelineView",
]
