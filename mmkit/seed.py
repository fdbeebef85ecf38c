"""Collecting seed matches of query minimizers against an index."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .misc import Pair128

MAX_MAX_HIGH_OCC = 128

_MASK32 = 0xFFFFFFFF


@dataclass(slots=True)
class Seed:
    """A query minimizer with its occurrences ``cr`` in the index."""

    q_pos: int
    q_span: int
    cr: tuple[int, ...]
    seg_id: int = 0
    is_tandem: bool = False
    flt: bool = False

    @property
    def n(self) -> int:
        """Number of occurrences in the index."""
        return len(self.cr)


@dataclass
class MatchResult:
    """Seeds kept after filtering, with totals over them."""

    seeds: list[Seed] = field(default_factory=list)
    n_a: int = 0
    rep_len: int = 0
    mini_pos: list[int] = field(default_factory=list)


def collect_all(index: Mapping[int, Sequence[int]], minimizers: Sequence[Pair128]) -> list[Seed]:
    """Look up each minimizer (``x >> 8`` is its hash) in ``index``.

    Minimizers absent from the index are dropped. A seed is tandem when the
    minimizer next to it in ``minimizers`` has the same hash.
    """
    seeds: list[Seed] = []
    n = len(minimizers)
    for i, mz in enumerate(minimizers):
        key = mz.x >> 8
        cr = index.get(key)
        if not cr:
            continue
        tandem = (i > 0 and minimizers[i - 1].x >> 8 == key) or (
            i < n - 1 and minimizers[i + 1].x >> 8 == key
        )
        seeds.append(
            Seed(
                q_pos=mz.y & _MASK32,
                q_span=mz.x & 0xFF,
                cr=tuple(cr),
                seg_id=mz.y >> 32,
                is_tandem=tandem,
            )
        )
    return seeds


def select_seeds(
    seeds: Sequence[Seed], qlen: int, max_occ: int, max_max_occ: int, dist: int
) -> None:
    """Mark high-occurrence seeds as filtered, keeping a few in each streak.

    In each run of seeds occurring more than ``max_occ`` times, about one seed
    per ``dist`` query bases is kept, the least frequent first; seeds
    occurring more than ``max_max_occ`` times are always filtered.
    """
    n = len(seeds)
    if n <= 1 or not any(s.n > max_occ for s in seeds):
        return
    last0 = -1
    for i in range(n + 1):
        if i < n and seeds[i].n > max_occ:
            continue
        if i - last0 > 1:
            ps = 0 if last0 < 0 else seeds[last0].q_pos >> 1
            pe = qlen if i == n else seeds[i].q_pos >> 1
            st, en = last0 + 1, i
            max_high_occ = min(int((pe - ps) / dist + .499), MAX_MAX_HIGH_OCC)
            heap = [-((seeds[j].n << 32) | j) for j in range(st, min(en, st + max(max_high_occ, 0)))]
            if heap:
                heapq.heapify(heap)
                for j in range(st + len(heap), en):
                    if seeds[j].n < (-heap[0]) >> 32:
                        heapq.heapreplace(heap, -((seeds[j].n << 32) | j))
                for key in heap:
                    seeds[(-key) & _MASK32].flt = True
            for s in seeds[st:en]:
                s.flt = not s.flt
                if s.n > max_max_occ:
                    s.flt = True
        last0 = i


def collect_matches(
    index: Mapping[int, Sequence[int]],
    minimizers: Sequence[Pair128],
    qlen: int,
    max_occ: int,
    max_max_occ: int,
    dist: int,
) -> MatchResult:
    """Collect seeds, filter repetitive ones and total what remains.

    ``rep_len`` is the query length covered by filtered seeds; ``mini_pos``
    holds ``q_span << 32 | query_pos`` of each kept seed.
    """
    seeds = collect_all(index, minimizers)
    if dist > 0 and max_max_occ > max_occ:
        select_seeds(seeds, qlen, max_occ, max_max_occ, dist)
    else:
        for s in seeds:
            if s.n > max_occ:
                s.flt = True
    result = MatchResult()
    rep_st = rep_en = 0
    for s in seeds:
        if s.flt:
            en = (s.q_pos >> 1) + 1
            st = en - s.q_span
            if st > rep_en:
                result.rep_len += rep_en - rep_st
                rep_st, rep_en = st, en
            else:
                rep_en = en
        else:
            result.n_a += s.n
            result.mini_pos.append(s.q_span << 32 | s.q_pos >> 1)
            result.seeds.append(s)
    result.rep_len += rep_en - rep_st
    return result