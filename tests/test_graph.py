from __future__ import annotations

from buildtimeline.dsl import job, registry
from buildtimeline.graph import resolve_graph, stage_columns


def test_linear_chain_in_discovery_order():
    reg = registry(
        job("a", downstream=["b"]),
        job("b", downstream=["c"]),
        job("c"),
    )
    graph = resolve_graph(reg.find_job("a"), None, reg)
    assert graph.names() == ["a", "b", "c"]


def test_depth_first_pre_order():
    reg = registry(
        job("a", downstream=["b", "c"]),
        job("b", downstream=["d"]),
        job("c"),
        job("d"),
    )
    graph = resolve_graph(reg.find_job("a"), None, reg)
    assert graph.names() == ["a", "b", "d", "c"]


def test_cycle_terminates_and_each_job_once():
    reg = registry(
        job("a", downstream=["b"]),
        job("b", downstream=["c"]),
        job("c", downstream=["a", "b"]),
    )
    graph = resolve_graph(reg.find_job("a"), None, reg)
    assert graph.names() == ["a", "b", "c"]
    assert len(set(graph.names())) == len(graph)


def test_self_loop():
    reg = registry(job("a", downstream=["a"]))
    graph = resolve_graph(reg.find_job("a"), None, reg)
    assert graph.names() == ["a"]


def test_diamond_visits_shared_job_once():
    reg = registry(
        job("a", downstream=["b", "c"]),
        job("b", downstream=["d"]),
        job("c", downstream=["d"]),
        job("d"),
    )
    graph = resolve_graph(reg.find_job("a"), None, reg)
    assert graph.names() == ["a", "b", "d", "c"]
    assert graph.downstream_of("c") == ["d"]


def test_end_job_included_but_not_expanded():
    reg = registry(
        job("build", downstream=["test"]),
        job("test", downstream=["deploy"]),
        job("deploy", downstream=["smoke"]),
        job("smoke"),
    )
    graph = resolve_graph(reg.find_job("build"), reg.find_job("test"), reg)
    assert "test" in graph
    assert "deploy" not in graph
    assert "smoke" not in graph


def test_jobs_on_another_branch_survive_end_job():
    reg = registry(
        job("a", downstream=["end", "side"]),
        job("end", downstream=["after"]),
        job("side"),
        job("after"),
    )
    graph = resolve_graph(reg.find_job("a"), reg.find_job("end"), reg)
    assert graph.names() == ["a", "end", "side"]


def test_missing_start_is_empty():
    reg = registry(job("a"))
    graph = resolve_graph(None, None, reg)
    assert len(graph) == 0
    assert stage_columns(graph) == {}


def test_unknown_downstream_names_are_ignored():
    reg = registry(job("a", downstream=["ghost", "b"]), job("b"))
    graph = resolve_graph(reg.find_job("a"), None, reg)
    assert graph.names() == ["a", "b"]


def test_stage_columns_use_shortest_depth():
    reg = registry(
        job("a", downstream=["b", "d"]),
        job("b", downstream=["c"]),
        job("c", downstream=["d"]),
        job("d"),
    )
    graph = resolve_graph(reg.find_job("a"), None, reg)
    assert stage_columns(graph) == {"a": 0, "b": 1, "c": 2, "d": 1}
