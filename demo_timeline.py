# demo_timeline.py
# A small delivery pipeline: build -> test -> (manual) deploy, plus two services
# picked up by a regular expression.
from __future__ import annotations

from buildtimeline import ComponentSpec, RegexSpec, TimelineView, ViewSettings
from buildtimeline.dsl import build, conditional, job, registry, trigger


def timeline():
    jobs = registry(
        job(
            "app-build",
            build(1, "succeeded", duration=42, user="alice", parameters={"BRANCH": "main"}),
            build(2, "failed", duration=38, scm=True),
            build(3, "succeeded", duration=40, scm=True),
            downstream=["app-test"],
            url="https://ci.example.com/job/app-build/",
        ),
        job(
            "app-test",
            build(1, "succeeded", duration=120, upstream=("app-build", 1)),
            build(2, "running", upstream=("app-build", 3)),
            manual=["app-deploy"],
            post_build=[conditional(trigger("app-report"))],
        ),
        job("app-report", build(1, "succeeded", duration=3, upstream=("app-test", 1))),
        job("app-deploy", build(1, "succeeded", duration=60, upstream=("app-test", 1), user="bob")),
        job("svc-build-1", build(7, "succeeded", duration=12)),
        job("svc-build-2", build(3, "unstable", duration=15)),
    )

    return TimelineView(
        "delivery",
        jobs,
        ViewSettings(show_aggregated=True, sorting="failedFirst", show_changes=True, allow_rebuild=True),
        component_specs=[ComponentSpec(name="App", first_job="app-build", last_job="app-deploy")],
        regex_specs=[RegexSpec(regexp=r"svc-build-(\d+)")],
    )
