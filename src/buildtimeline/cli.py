# cli.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from buildtimeline.errors import AuthorizationError, TimelineError
from buildtimeline.loader import find_timeline_files, load_timeline
from buildtimeline.matching import validate_pattern
from buildtimeline.ui.console import Console, get_console, set_console
from buildtimeline.view import TimelineView


USAGE_HINT = "Pass one with --timeline, e.g. buildtimeline show --timeline delivery_timeline.py"


def _fail(title: str, message: str, details: list[str] | None = None) -> NoReturn:
    get_console().print_error(title, message, details=details, suggestion=USAGE_HINT)
    sys.exit(1)


def discover_timeline(timeline_arg: str | None) -> Path:
    """
    Path of the timeline file to load.

    An explicit `--timeline` may omit the `.py` suffix. Without one, the
    working directory must hold exactly one timeline file.
    """
    if timeline_arg:
        for candidate in (Path(timeline_arg), Path(f"{timeline_arg}.py")):
            if candidate.is_file():
                return candidate
        _fail("Timeline file not found", f"{timeline_arg} does not exist")

    files = find_timeline_files(".")
    if not files:
        _fail("No timeline file found", "Expected timeline.py or *_timeline.py in the working directory")
    if len(files) > 1:
        _fail("Ambiguous timeline", "More than one timeline file here:", [str(f) for f in files])
    return files[0]


def _load(ctx, timeline: str | None) -> TimelineView:
    console = get_console()
    path = discover_timeline(timeline)
    try:
        view = load_timeline(path)
    except Exception as e:
        console.print_error(
            "Failed to load timeline",
            f"Could not load timeline from {path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)
    console.print_debug(f"Loaded view {view.name!r} from {path}")
    return view


timeline_option = click.option(
    "--timeline",
    default=None,
    help="Timeline file path (defaults to timeline.py if present)",
)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """buildtimeline: delivery pipelines from your build history."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@timeline_option
@click.option("--page", default=1, type=int, show_default=True, help="Page of pipelines to show")
@click.option("--full-screen/--no-full-screen", default=False, help="Full screen mode (paging disabled)")
@click.pass_context
def show(ctx, timeline, page, full_screen):
    """Print the pipelines of a timeline view."""
    console = get_console()
    view = _load(ctx, timeline)

    components = view.pipelines(page=page, full_screen=full_screen)
    if view.error:
        console.print_error("Could not build pipelines", view.error)
        sys.exit(1)

    console.print_header(f"VIEW: {view.name}")
    console.print_components(components)
    if view.settings.show_total_build_time:
        for component in components:
            for pipeline in component.pipelines:
                label = "aggregated" if pipeline.aggregated else pipeline.version
                console.print_info(f"{component.name} {label}: {pipeline.total_build_time:.1f}s")


@cli.command()
@timeline_option
@click.pass_context
def items(ctx, timeline):
    """List every job covered by a timeline view."""
    view = _load(ctx, timeline)
    get_console().print_items(view.items())


@cli.command("check-regex")
@click.argument("pattern")
def check_regex(pattern):
    """Validate a component regular expression."""
    console = get_console()
    problem = validate_pattern(pattern)
    if problem:
        console.print_error("Invalid pattern", problem, details=[pattern])
        sys.exit(1)
    console.print_info("OK")


@cli.command()
@timeline_option
@click.argument("project")
@click.argument("upstream")
@click.argument("build_id")
@click.option("--user", default=None, help="User name recorded on the build")
@click.pass_context
def trigger(ctx, timeline, project, upstream, build_id, user):
    """Manually trigger PROJECT for build BUILD_ID of UPSTREAM."""
    console = get_console()
    view = _load(ctx, timeline)
    try:
        view.trigger_manual(project, upstream, build_id, user=user)
    except AuthorizationError as e:
        console.print_error("Not authorized", str(e))
        sys.exit(1)
    except TimelineError as e:
        console.print_error("Trigger failed", str(e), details=[e.describe()] if ctx.obj.get("debug") else None)
        sys.exit(1)
    console.print_info(f"Triggered {project}")


@cli.command()
@timeline_option
@click.argument("project")
@click.argument("build_id")
@click.option("--user", default=None, help="User name recorded on the build")
@click.pass_context
def rebuild(ctx, timeline, project, build_id, user):
    """Rebuild build BUILD_ID of PROJECT with the same parameters."""
    console = get_console()
    view = _load(ctx, timeline)
    if not view.settings.allow_rebuild:
        console.print_error("Rebuild disabled", f"View {view.name!r} does not allow rebuilds")
        sys.exit(1)
    try:
        view.trigger_rebuild(project, build_id, user=user)
    except TimelineError as e:
        console.print_error("Rebuild failed", str(e))
        sys.exit(1)
    console.print_info(f"Rebuild of {project} #{build_id} scheduled")


@cli.command()
@timeline_option
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8080, type=int, show_default=True)
@click.pass_context
def serve(ctx, timeline, host, port):
    """Serve the timeline view as a JSON API."""
    import uvicorn
    from buildtimeline.api import create_app

    view = _load(ctx, timeline)
    try:
        uvicorn.run(create_app(view), host=host, port=port)
    except KeyboardInterrupt:
        get_console().print_info("\nStopped by user")
        sys.exit(0)
    except OSError as e:
        get_console().print_exception(e)
        sys.exit(1)


if __name__ == "__main__":
    cli()
