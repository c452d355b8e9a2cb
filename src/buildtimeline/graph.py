# graph.py
from __future__ import annotations

from collections import deque
from typing import Dict, Iterator, List

from .model import Job
from .registry import JobRegistry
from .resolvers import EdgeResolver, downstream_jobs


class JobGraph:
    """
    Ordered mapping job name -> Job, in discovery order, plus the edges
    found while walking it.

    The cycle guard is identity based: a job whose name is already in the
    graph is never expanded again, however many edges point at it.
    """

    def __init__(self) -> None:
        self.jobs: Dict[str, Job] = {}
        self.edges: Dict[str, List[str]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self.jobs

    def __iter__(self) -> Iterator[str]:
        return iter(self.jobs)

    def __len__(self) -> int:
        return len(self.jobs)

    def __getitem__(self, name: str) -> Job:
        return self.jobs[name]

    def values(self) -> List[Job]:
        return list(self.jobs.values())

    def names(self) -> List[str]:
        return list(self.jobs)

    def downstream_of(self, name: str) -> List[str]:
        """Edges from `name` that stay inside the graph."""
        return [n for n in self.edges.get(name, []) if n in self.jobs]


def resolve_graph(
    first: Job | None,
    last: Job | None,
    registry: JobRegistry,
    resolvers: List[EdgeResolver] | None = None,
) -> JobGraph:
    """
    All jobs reachable from `first`, stopping at `last` when given.

    Depth-first, pre-order: a job is inserted before any of its downstream
    jobs, and its downstream jobs are visited in resolver order. `last` is
    inserted but not expanded.
    """
    graph = JobGraph()
    if first is None:
        return graph

    stack: List[Job] = [first]
    while stack:
        job = stack.pop()

        if job.name in graph:
            continue

        graph.jobs[job.name] = job

        if last is not None and job.name == last.name:
            continue

        children = downstream_jobs(job, registry, resolvers)
        graph.edges[job.name] = [c.name for c in children]
        # reversed so the first child is popped (and visited) first
        for child in reversed(children):
            if child.name not in graph:
                stack.append(child)

    return graph


def stage_columns(graph: JobGraph) -> Dict[str, int]:
    """
    Column (breadth-first depth from the first job) of every job in the graph.
    Each column can be drawn side by side.
    """
    names = graph.names()
    if not names:
        return {}

    columns: Dict[str, int] = {names[0]: 0}
    q = deque([names[0]])

    while q:
        node = q.popleft()
        for child in graph.downstream_of(node):
            if child not in columns:
                columns[child] = columns[node] + 1
                q.append(child)

    # every job gets a column
    for n in names:
        columns.setdefault(n, 0)
    return columns
