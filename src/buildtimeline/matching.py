# matching.py
from __future__ import annotations

import re
from typing import Dict, Iterable, Optional

from .errors import PatternValidationError
from .model import Job
from .ui.console import get_console


def validate_pattern(value: str | None) -> Optional[str]:
    """
    Check a component regular expression.

    Returns None when the pattern is usable, otherwise the message to show
    next to the field.
    """
    if value is None:
        return None
    try:
        compiled = re.compile(value)
    except re.error:
        return "Syntax error in regular-expression pattern"
    if compiled.groups == 0:
        return "No capture group defined"
    if compiled.groups > 1:
        return "Too many capture groups defined"
    return None


def match_components(pattern: str, jobs: Iterable[Job]) -> Dict[str, Job]:
    """
    Map the captured group of `pattern` to the job whose full name matched.

    Raises PatternValidationError unless the pattern has exactly one capture
    group. A pattern that does not compile gives an empty result and a
    warning. When two jobs capture the same name the last one wins.
    """
    console = get_console()
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        console.print_warning(f"Could not find projects on regular expression {pattern!r}: {e}")
        return {}

    if compiled.groups != 1:
        raise PatternValidationError(pattern, validate_pattern(pattern) or "Invalid pattern")

    result: Dict[str, Job] = {}
    for job in jobs:
        m = compiled.search(job.name)
        # an optional group can match without capturing anything
        if m and m.group(1) is not None:
            result[m.group(1)] = job
    return result
