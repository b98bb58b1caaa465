"""Consistency checks for facet meshes.

The mesh builder trusts its input beyond per-facet planarity.  These
helpers let callers check a mesh before building a tree from it.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence


def _edges(facet: Sequence[int]):
    count = len(facet)
    for i in range(count):
        yield facet[i], facet[(i + 1) % count]


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def facets_closed(facets: Sequence[Sequence[int]]) -> "CheckResult":
    """Check that every edge is shared by exactly two facets."""

    edges = Counter()
    for facet in facets:
        for a, b in _edges(facet):
            edges[_edge_key(a, b)] += 1

    boundary = sorted(edge for edge, count in edges.items() if count == 1)
    invalid = sorted(edge for edge, count in edges.items() if count > 2)

    warnings: List[str] = []
    ok = True
    if boundary:
        ok = False
        warnings.append(f'{len(boundary)} boundary edges detected')
    if invalid:
        ok = False
        warnings.append(f'edges with multiplicity >2: {invalid}')

    return CheckResult(ok, warnings)


def facets_oriented(facets: Sequence[Sequence[int]]) -> "CheckResult":
    """Check that neighbouring facets traverse their shared edges in opposite directions."""

    directed = Counter()
    for facet in facets:
        for a, b in _edges(facet):
            directed[(a, b)] += 1

    repeated = sorted(edge for edge, count in directed.items() if count > 1)
    if repeated:
        return CheckResult(False, [f'edges traversed twice in the same direction: {repeated}'])
    return CheckResult(True, [])


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


__all__ = [
    'CheckResult',
    'facets_closed',
    'facets_oriented',
]
