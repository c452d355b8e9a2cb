from __future__ import annotations

from buildtimeline.causes import attributed_builds, caused_by, is_queued
from buildtimeline.dsl import build, job, registry


def _reg():
    return registry(
        job("build", build(1), build(2)),
        job("test", build(1, upstream=("build", 1)), build(2, upstream=("build", 2))),
        job("deploy", build(1, upstream=("test", 2))),
        job("other", build(1, user="carol")),
    )


def test_direct_cause():
    reg = _reg()
    t1 = reg.find_job("test").get_build(1)
    assert caused_by(t1, "build", 1, reg)
    assert not caused_by(t1, "build", 2, reg)


def test_transitive_cause():
    reg = _reg()
    d1 = reg.find_job("deploy").get_build(1)
    assert caused_by(d1, "build", 2, reg)
    assert not caused_by(d1, "build", 1, reg)


def test_no_upstream_cause():
    reg = _reg()
    assert not caused_by(reg.find_job("other").get_build(1), "build", 1, reg)


def test_within_limits_the_walk():
    reg = _reg()
    d1 = reg.find_job("deploy").get_build(1)
    assert not caused_by(d1, "build", 2, reg, within={"build", "deploy"})
    assert caused_by(d1, "build", 2, reg, within={"build", "test", "deploy"})


def test_cyclic_cause_chain_terminates():
    reg = registry(
        job("a", build(1, upstream=("b", 1))),
        job("b", build(1, upstream=("a", 1))),
    )
    assert not caused_by(reg.find_job("a").get_build(1), "c", 1, reg)


def test_attributed_builds_newest_first():
    reg = registry(
        job("build", build(5)),
        job("test", build(1, upstream=("build", 5)), build(2, "failed"), build(3, upstream=("build", 5))),
    )
    first = reg.find_job("build")
    builds = attributed_builds(reg.find_job("test"), first, first.get_build(5), reg)
    assert [b.number for b in builds] == [3, 1]


def test_attributed_builds_of_first_job_is_anchor():
    reg = _reg()
    first = reg.find_job("build")
    anchor = first.get_build(2)
    assert attributed_builds(first, first, anchor, reg) == [anchor]


def test_is_queued():
    reg = registry(
        job("build", build(1), build(2)),
        job("test", build(1, upstream=("build", 1)), queued=[("build", 2)]),
        job("idle"),
        job("manual", queued=True),
    )
    test = reg.find_job("test")
    assert is_queued(test, reg)
    assert is_queued(test, reg, "build", 2)
    assert not is_queued(test, reg, "build", 1)
    assert not is_queued(reg.find_job("idle"), reg)
    assert is_queued(reg.find_job("manual"), reg)
    assert not is_queued(reg.find_job("manual"), reg, "build", 2)
