from __future__ import annotations

from buildtimeline.config import ComponentSpec, RegexSpec, ViewSettings
from buildtimeline.dsl import build, job, registry
from buildtimeline.model import Status
from buildtimeline.view import TimelineView


def _reg():
    return registry(
        job("app-build", build(1), build(2, "failed"), downstream=["app-test"], url="/job/app-build/"),
        job("app-test", build(1, upstream=("app-build", 1)), downstream=["app-deploy"]),
        job("app-deploy", build(1, upstream=("app-test", 1))),
        job("lib-build", build(1), build(2), build(3)),
        job("svc-build-1", build(4)),
        job("svc-build-2", build(2, "failed")),
        job("other"),
    )


def _view(reg=None, specs=None, regex=None, **settings):
    return TimelineView(
        "delivery",
        reg or _reg(),
        ViewSettings(**settings),
        component_specs=specs if specs is not None else [
            ComponentSpec(name="App", first_job="app-build"),
            ComponentSpec(name="Lib", first_job="lib-build"),
        ],
        regex_specs=regex or [],
    )


def test_components_from_specs_in_order():
    view = _view()
    components = view.pipelines()
    assert [(c.name, c.number) for c in components] == [("App", 1), ("Lib", 2)]
    assert components[0].first_job_url == "/job/app-build/"
    assert view.error is None
    assert view.last_updated is not None


def test_regex_components_follow_spec_components():
    view = _view(regex=[RegexSpec(regexp=r"svc-build-(\d+)")])
    components = view.pipelines()
    assert [(c.name, c.number) for c in components] == [("App", 1), ("Lib", 2), ("1", 1), ("2", 2)]


def test_unresolved_first_job_clears_result_and_keeps_error():
    view = _view(specs=[
        ComponentSpec(name="App", first_job="app-build"),
        ComponentSpec(name="Gone", first_job="missing"),
    ])
    assert view.pipelines() == []
    assert view.error == "Could not find project: missing"


def test_unresolved_last_job_is_an_error_too():
    view = _view(specs=[ComponentSpec(name="App", first_job="app-build", last_job="nope")])
    assert view.pipelines() == []
    assert "nope" in view.error


def test_successful_read_clears_previous_error():
    reg = _reg()
    view = _view(reg, specs=[ComponentSpec(name="X", first_job="later")])
    view.pipelines()
    assert view.error
    reg.add(job("later", build(1)))
    assert len(view.pipelines()) == 1
    assert view.error is None


def test_trim_to_max_visible_components_keeps_sort_order():
    specs = [ComponentSpec(name=n, first_job="lib-build") for n in ["e", "d", "c", "b", "a"]]
    view = _view(specs=specs, max_visible_components=2, sorting="latestActivity")
    components = view.pipelines()
    assert len(components) == 2
    # same activity everywhere, so the name breaks the tie
    assert [c.name for c in components] == ["a", "b"]


def test_unlimited_when_max_visible_not_positive():
    specs = [ComponentSpec(name=n, first_job="lib-build") for n in "abcde"]
    assert len(_view(specs=specs, max_visible_components=0).pipelines()) == 5


def test_failed_first_sorting():
    view = _view(regex=[RegexSpec(regexp=r"svc-build-(\d+)")], sorting="failedFirst")
    names = [c.name for c in view.pipelines()]
    # both failed at the same time: name decides
    assert names[:2] == ["2", "App"]


def test_aggregated_pipeline_comes_first():
    view = _view(show_aggregated=True, pipeline_count=1)
    app = view.pipelines()[0]
    assert [p.aggregated for p in app.pipelines] == [True, False]
    assert app.pipelines[0].stages[0].status is Status.FAILED


def test_paging_and_full_screen():
    view = _view(specs=[ComponentSpec(name="Lib", first_job="lib-build")], pipeline_count=1, max_pages=2)
    lib = view.pipelines(page=2)[0]
    assert [p.version for p in lib.pipelines] == ["#2"]
    assert lib.pagination.total_pages == 2

    lib = view.pipelines(page=2, full_screen=True)[0]
    assert [p.version for p in lib.pipelines] == ["#3"]
    assert lib.pagination is None


def test_items_cover_graph_and_regex_matches():
    view = _view(regex=[RegexSpec(regexp=r"svc-build-(\d+)")])
    assert view.items() == {"app-build", "app-test", "app-deploy", "lib-build", "svc-build-1", "svc-build-2"}
    assert view.contains("app-deploy")
    assert not view.contains("other")


def test_items_respect_last_job():
    view = _view(specs=[ComponentSpec(name="App", first_job="app-build", last_job="app-test")])
    assert view.items() == {"app-build", "app-test"}


def test_rename_and_delete_follow_specs():
    view = _view(specs=[
        ComponentSpec(name="App", first_job="app-build", last_job="app-deploy"),
        ComponentSpec(name="Lib", first_job="lib-build"),
    ])
    view.on_job_renamed("app-deploy", "app-release")
    assert view.component_specs[0].last_job == "app-release"

    view.on_job_renamed("lib-build", None)
    assert [s.name for s in view.component_specs] == ["App"]


def test_reads_are_independent():
    view = _view()
    first = view.pipelines()
    second = view.pipelines()
    assert first == second
    assert first[0] is not second[0]


def test_invalid_regex_spec_is_skipped_with_warning(capsys):
    # model_construct skips validation, like a stale stored config would
    bad = RegexSpec.model_construct(regexp=r"svc-build-\d+")
    view = _view(regex=[bad, RegexSpec(regexp=r"svc-build-(\d+)")])
    names = [c.name for c in view.pipelines()]
    assert names == ["App", "Lib", "1", "2"]
    assert view.error is None
    assert "No capture group defined" in capsys.readouterr().err


def test_optional_group_components_sort_by_latest_activity():
    reg = registry(job("svc", build(1)), job("svc-2", build(2)), job("svc-3"))
    view = _view(reg, specs=[], regex=[RegexSpec(regexp=r"svc(-\d+)?")], sorting="latestActivity")
    assert [c.name for c in view.pipelines()] == ["-2", "-3"]
    assert view.error is None


def test_items_skip_components_with_missing_jobs():
    view = _view(specs=[
        ComponentSpec(name="App", first_job="app-build", last_job="gone"),
        ComponentSpec(name="Lib", first_job="lib-build"),
    ])
    assert view.items() == {"lib-build"}
    assert not view.contains("app-build")
