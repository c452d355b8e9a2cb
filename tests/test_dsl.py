from __future__ import annotations

from datetime import timedelta

import pytest

from buildtimeline.dsl import EPOCH, build, conditional, define, job, registry, trigger
from buildtimeline.model import Cause, ConditionalStep, Status, TriggerStep


def test_build_defaults():
    b = build(3)
    assert b.status is Status.SUCCEEDED
    assert b.timestamp == EPOCH + timedelta(minutes=3)
    assert b.causes == []


def test_build_causes():
    b = build(1, "failed", upstream=[("a", 1), ("b", 2)], user="me", scm=True)
    assert b.status is Status.FAILED
    assert b.causes == [
        Cause.upstream("a", 1),
        Cause.upstream("b", 2),
        Cause.by_user("me"),
        Cause(kind="scm"),
    ]
    assert b.upstream_causes == b.causes[:2]


def test_job_sorts_builds_newest_first():
    j = job("a", build(1), build(3), build(2))
    assert [b.number for b in j.builds] == [3, 2, 1]
    assert j.last_build.number == 3
    assert j.next_build_number == 4
    assert j.get_build(2).number == 2
    assert j.get_build(9) is None
    assert [b.number for b in j.recent_builds(2)] == [3, 2]
    assert j.recent_builds(-1) == []


def test_queued_job():
    assert job("a", queued=True).queue_item.causes == []
    assert job("a", queued=[("up", 4)]).queue_item.causes == [Cause.upstream("up", 4)]


def test_steps():
    step = trigger("b", "c")
    assert step == TriggerStep(projects="b, c")
    assert step.project_names() == ["b", "c"]
    assert conditional(step) == ConditionalStep(steps=(step,))


def test_builder():
    j = (
        define("deploy")
        .triggers("smoke")
        .manually_triggers("release")
        .with_step(trigger("notify"))
        .with_post_build(conditional(trigger("report")))
        .with_build(1, duration=5)
        .titled("Deploy")
        .at("/job/deploy/")
        .parameterized()
        .build()
    )
    assert j.downstream == ["smoke"]
    assert j.manual_downstream == ["release"]
    assert j.title == "Deploy"
    assert j.url == "/job/deploy/"
    assert j.parameterized and not j.disabled
    assert j.last_build.duration == 5


def test_registry_accepts_builders_and_rejects_duplicates():
    reg = registry(define("a").triggers("b"), job("b"))
    assert [j.name for j in reg.downstream_links_of(reg.find_job("a"))] == ["b"]
    with pytest.raises(ValueError, match="Duplicate job name"):
        reg.add(job("a"))


def test_registry_folders():
    reg = registry(job("team/a"), job("a"), job("team/b"))
    assert reg.find_job("a", context="team").name == "team/a"
    assert reg.find_job("/a/").name == "a"
    assert [j.name for j in reg.all_jobs("team")] == ["team/a", "team/b"]
    reg.rename("team/b", "team/c")
    assert reg.find_job("c", context="team").name == "team/c"
    reg.remove("team/c")
    assert reg.find_job("team/c") is None
