"""
Shortest-path helpers over any grid exposing ``TraversableMap``.

The algorithms here only see node indices and edge costs; which tiles are
walkable is entirely the map's decision.
"""
from __future__ import annotations

import heapq
import logging
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)


class TraversableMap(Protocol):
    """Minimal graph capability consumed by the search functions."""

    def __len__(self) -> int:
        ...

    def available_exits(self, idx: int) -> Sequence[Tuple[int, int]]:
        ...


def dijkstra_map(
    graph: TraversableMap,
    starts: Iterable[int],
    max_depth: Optional[int] = None,
) -> List[Optional[int]]:
    """
    Compute the cheapest distance from any of ``starts`` to every node.

    Returns a list indexed like the graph; ``None`` marks unreachable nodes
    (or nodes farther than ``max_depth``). With unit costs the distance is the
    edge count.
    """
    dist: List[Optional[int]] = [None] * len(graph)
    heap: List[Tuple[int, int]] = []
    for s in starts:
        if 0 <= s < len(dist) and dist[s] is None:
            dist[s] = 0
            heap.append((0, s))
    heapq.heapify(heap)

    while heap:
        d, idx = heapq.heappop(heap)
        current = dist[idx]
        if current is not None and d > current:
            continue
        for n_idx, cost in graph.available_exits(idx):
            nd = d + cost
            if max_depth is not None and nd > max_depth:
                continue
            known = dist[n_idx]
            if known is None or nd < known:
                dist[n_idx] = nd
                heapq.heappush(heap, (nd, n_idx))
    return dist


def farthest_index(distances: Sequence[Optional[int]], exclude: Iterable[int] = ()) -> Optional[int]:
    """Index with the largest finite distance; ties go to the lowest index."""
    skip = set(exclude)
    best: Optional[int] = None
    best_d = -1
    for idx, d in enumerate(distances):
        if d is None or idx in skip:
            continue
        if d > best_d:
            best_d = d
            best = idx
    return best


def find_path(graph: TraversableMap, start: int, goal: int) -> Optional[List[int]]:
    """
    Shortest path from ``start`` to ``goal`` as a list of indices, both ends
    included. Returns None when the goal is unreachable.
    """
    dist = dijkstra_map(graph, [start])
    if not 0 <= goal < len(dist) or dist[goal] is None:
        return None
    # Walk back downhill from the goal; neighbor order keeps this deterministic
    path = [goal]
    idx = goal
    while idx != start:
        d = dist[idx]
        step = None
        for n_idx, cost in graph.available_exits(idx):
            nd = dist[n_idx]
            if nd is not None and d is not None and nd + cost == d:
                step = n_idx
                break
        if step is None:
            logger.error("Path reconstruction stalled at index %d", idx)
            return None
        path.append(step)
        idx = step
    path.reverse()
    return path
