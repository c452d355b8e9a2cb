# loader.py
from __future__ import annotations

import runpy
from pathlib import Path

from .view import TimelineView


def load_timeline(path: str | Path) -> TimelineView:
    """
    Load a timeline view from a python file path.

    The file must define either:
      - timeline() -> TimelineView
      - TIMELINE = TimelineView(...)
    """
    tl_path = Path(path).expanduser().resolve()
    if not tl_path.exists():
        raise FileNotFoundError(f"Timeline file not found: {tl_path}")
    if tl_path.suffix != ".py":
        raise ValueError(f"Timeline must be a .py file, got: {tl_path.name}")

    module_name = f"buildtimeline_file_{tl_path.stem}"
    globals_dict = runpy.run_path(str(tl_path), run_name=module_name)

    view = None
    if "timeline" in globals_dict and callable(globals_dict["timeline"]):
        view = globals_dict["timeline"]()
    elif "TIMELINE" in globals_dict:
        view = globals_dict["TIMELINE"]

    if not isinstance(view, TimelineView):
        raise TypeError(
            "Timeline file must return/define a TimelineView. "
            "Define timeline() -> TimelineView or TIMELINE = TimelineView(...)."
        )
    return view


def find_timeline_files(directory: str | Path = ".") -> list[Path]:
    """timeline.py first, then any other *_timeline.py in `directory`."""
    root = Path(directory)
    found = []
    default = root / "timeline.py"
    if default.exists():
        found.append(default)
    for p in sorted(root.glob("*_timeline.py")):
        if p != default:
            found.append(p)
    return found
