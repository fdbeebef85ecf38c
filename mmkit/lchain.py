"""Chaining of seed anchors by dynamic programming or range-minimum queries.

An anchor is a :class:`~mmkit.misc.Pair128` with
``x = tid << 33 | rev << 32 | target_pos`` and
``y = flags << 40 | q_span << 32 | query_pos``; the segment id sits in bits
48 to 55 of ``y``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from .misc import Pair128, radix_sort_128x
from .rmq import RmqTree

SEED_SEG_SHIFT = 48
SEED_SEG_MASK = 0xFF << SEED_SEG_SHIFT

_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1
_INT32_MAX = (1 << 31) - 1


def _f32(x: float) -> float:
    return struct.unpack("<f", struct.pack("<f", x))[0]


def _i32(x: int) -> int:
    x &= _MASK32
    return x - (1 << 32) if x & 0x80000000 else x


_C1 = _f32(-0.34484843)
_C2 = _f32(2.02466578)
_C3 = _f32(0.67487759)


def mg_log2(x: float) -> float:
    """Fast single-precision approximation of log2(x); meant for x >= 2."""
    bits = struct.unpack("<I", struct.pack("<f", x))[0]
    log_2 = float(((bits >> 23) & 255) - 128)
    bits = (bits & 0x807FFFFF) + (127 << 23)
    zf = struct.unpack("<f", struct.pack("<I", bits & _MASK32))[0]
    t = _f32(_C1 * zf)
    t = _f32(t + _C2)
    t = _f32(t * zf)
    t = _f32(t - _C3)
    return _f32(log_2 + t)


@dataclass
class ChainResult:
    """Chains as ``(score, n_anchors)`` pairs and their anchors, chain after chain."""

    chains: list[tuple[int, int]] = field(default_factory=list)
    anchors: list[Pair128] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.chains)

    def __iter__(self) -> Iterator[tuple[int, list[Pair128]]]:
        """Yield ``(score, anchors)`` for each chain."""
        off = 0
        for score, cnt in self.chains:
            yield score, self.anchors[off:off + cnt]
            off += cnt


def chain_backtrack(
    f: Sequence[int], p: Sequence[int], min_cnt: int, min_sc: int
) -> tuple[list[tuple[int, int]], list[int]]:
    """Extract chains from chaining scores ``f`` and predecessors ``p``.

    Returns the chains as ``(score, n_anchors)`` pairs, best end scores first,
    and the anchor indices of all chains, each chain listed from its last
    anchor back to its first. An anchor belongs to at most one chain.
    """
    n = len(f)
    z = radix_sort_128x(Pair128(f[i], i) for i in range(n) if f[i] >= min_sc)
    used = [False] * n
    chains: list[tuple[int, int]] = []
    members: list[int] = []
    for item in reversed(z):
        n_v0 = len(members)
        i = item.y
        while i >= 0 and not used[i]:
            members.append(i)
            used[i] = True
            i = p[i]
        sc = item.x if i < 0 else item.x - f[i]
        cnt = len(members) - n_v0
        if sc >= min_sc and cnt > 0 and cnt >= min_cnt:
            chains.append((sc, cnt))
        else:
            del members[n_v0:]
    return chains, members


def _compact(
    chains: list[tuple[int, int]], members: list[int], a: Sequence[Pair128]
) -> ChainResult:
    groups: list[list[Pair128]] = []
    off = 0
    for _, cnt in chains:
        groups.append([a[k] for k in reversed(members[off:off + cnt])])
        off += cnt
    order = sorted(range(len(chains)), key=lambda c: groups[c][0].x)
    result = ChainResult()
    for c in order:
        result.chains.append(chains[c])
        result.anchors.extend(groups[c])
    return result


def _gap_penalty(dd: int, dg: int, gap: float, skip: float) -> tuple[float, float]:
    lin_pen = _f32(_f32(gap * _f32(float(dd))) + _f32(skip * _f32(float(dg))))
    log_pen = mg_log2(dd + 1) if dd >= 1 else 0.0
    return lin_pen, log_pen


def _chain_score(
    ai: Pair128, aj: Pair128, max_dist_x: int, max_dist_y: int, bw: int,
    gap: float, skip: float, is_cdna: bool, n_seg: int,
) -> Optional[int]:
    dq = _i32(_i32(ai.y) - _i32(aj.y))
    sidi = (ai.y & SEED_SEG_MASK) >> SEED_SEG_SHIFT
    sidj = (aj.y & SEED_SEG_MASK) >> SEED_SEG_SHIFT
    if dq <= 0 or dq > max_dist_x:
        return None
    dr = _i32(ai.x - aj.x)
    same = sidi == sidj
    if same and (dr == 0 or dq > max_dist_y):
        return None
    dd = abs(dr - dq)
    if same and dd > bw:
        return None
    if n_seg > 1 and not is_cdna and same and dr > max_dist_y:
        return None
    dg = min(dr, dq)
    q_span = (aj.y >> 32) & 0xFF
    sc = min(q_span, dg)
    if dd or dg > q_span:
        lin_pen, log_pen = _gap_penalty(dd, dg, gap, skip)
        if is_cdna and dr > dq:
            sc -= int(min(lin_pen, log_pen))
        else:
            sc -= int(_f32(lin_pen + _f32(0.5 * log_pen)))
    return sc


def _simple_score(ai: Pair128, aj: Pair128, gap: float, skip: float) -> tuple[int, bool, int]:
    dq = _i32(_i32(ai.y) - _i32(aj.y))
    dr = _i32(ai.x - aj.x)
    dd = abs(dr - dq)
    dg = min(dr, dq)
    q_span = (aj.y >> 32) & 0xFF
    sc = min(q_span, dg)
    exact = dd == 0 and dg <= q_span
    if dd or dq > q_span:
        lin_pen, log_pen = _gap_penalty(dd, dg, gap, skip)
        sc -= int(_f32(lin_pen + _f32(0.5 * log_pen)))
    return sc, exact, dd


def chain_dp(
    anchors: Sequence[Pair128],
    max_dist_x: int = 5000,
    max_dist_y: int = 5000,
    bw: int = 500,
    max_skip: int = 25,
    max_iter: int = 5000,
    min_cnt: int = 3,
    min_sc: int = 40,
    chn_pen_gap: float = 0.12,
    chn_pen_skip: float = 0.0,
    is_cdna: bool = False,
    n_seg: int = 1,
) -> ChainResult:
    """Chain anchors sorted by ``x`` with quadratic-time dynamic programming."""
    a = list(anchors)
    n = len(a)
    if n == 0:
        return ChainResult()
    max_dist_x = max(max_dist_x, bw)
    if max_dist_y < bw and not is_cdna:
        max_dist_y = bw
    gap, skip = _f32(chn_pen_gap), _f32(chn_pen_skip)
    f = [0] * n
    p = [-1] * n
    t = [0] * n
    st = 0
    max_ii = -1
    for i, ai in enumerate(a):
        max_j = -1
        max_f = (ai.y >> 32) & 0xFF
        n_skip = 0
        while st < i and (ai.x >> 32 != a[st].x >> 32 or ai.x > a[st].x + max_dist_x):
            st += 1
        if i - st > max_iter:
            st = i - max_iter
        j = i - 1
        while j >= st:
            sc = _chain_score(ai, a[j], max_dist_x, max_dist_y, bw, gap, skip, is_cdna, n_seg)
            if sc is not None:
                sc += f[j]
                if sc > max_f:
                    max_f, max_j = sc, j
                    if n_skip > 0:
                        n_skip -= 1
                elif t[j] == i:
                    n_skip += 1
                    if n_skip > max_skip:
                        break
                if p[j] >= 0:
                    t[p[j]] = i
            j -= 1
        end_j = j
        if max_ii < 0 or ((ai.x - a[max_ii].x) & _MASK64) > max_dist_x:
            best: Optional[int] = None
            max_ii = -1
            for jj in range(i - 1, st - 1, -1):
                if best is None or best < f[jj]:
                    best, max_ii = f[jj], jj
        if 0 <= max_ii < end_j:
            tmp = _chain_score(ai, a[max_ii], max_dist_x, max_dist_y, bw, gap, skip, is_cdna, n_seg)
            if tmp is not None and max_f < tmp + f[max_ii]:
                max_f, max_j = tmp + f[max_ii], max_ii
        f[i], p[i] = max_f, max_j
        if max_ii < 0 or (((ai.x - a[max_ii].x) & _MASK64) <= max_dist_x and f[max_ii] < f[i]):
            max_ii = i
    chains, members = chain_backtrack(f, p, min_cnt, min_sc)
    if not chains:
        return ChainResult()
    return _compact(chains, members, a)


def chain_rmq(
    anchors: Sequence[Pair128],
    max_dist: int = 5000,
    max_dist_inner: int = 1000,
    bw: int = 500,
    max_chn_skip: int = 25,
    cap_rmq_size: int = 100000,
    min_cnt: int = 3,
    min_sc: int = 40,
    chn_pen_gap: float = 0.12,
    chn_pen_skip: float = 0.0,
) -> ChainResult:
    """Chain anchors sorted by ``x`` using range-minimum queries over a balanced tree."""
    a = list(anchors)
    n = len(a)
    if n == 0:
        return ChainResult()
    max_dist = max(max_dist, bw)
    if max_dist_inner <= 0 or max_dist_inner >= max_dist:
        max_dist_inner = 0
    gap, skip = _f32(chn_pen_gap), _f32(chn_pen_skip)
    f = [0] * n
    p = [-1] * n
    t = [0] * n
    root = RmqTree()
    inner = RmqTree()
    st = st_inner = i0 = 0
    for i, ai in enumerate(a):
        max_j = -1
        yi = _i32(ai.y)
        max_f = (ai.y >> 32) & 0xFF
        if i0 < i and a[i0].x != ai.x:
            for j in range(i0, i):
                key = (_i32(a[j].y), j)
                pri = -(f[j] + 0.5 * gap * (_i32(a[j].x) + _i32(a[j].y)))
                root.insert(key, pri)
                if max_dist_inner > 0:
                    inner.insert(key, pri)
            i0 = i
        while st < i and (
            ai.x >> 32 != a[st].x >> 32 or ai.x > a[st].x + max_dist or len(root) > cap_rmq_size
        ):
            root.erase((_i32(a[st].y), st))
            st += 1
        if max_dist_inner > 0:
            while st_inner < i and (
                ai.x >> 32 != a[st_inner].x >> 32
                or ai.x > a[st_inner].x + max_dist_inner
                or len(inner) > cap_rmq_size
            ):
                inner.erase((_i32(a[st_inner].y), st_inner))
                st_inner += 1
        q = root.rmq((yi - max_dist, _INT32_MAX), (yi, 0))
        if q is not None:
            j = q.key[1]
            sc0, exact, width = _simple_score(ai, a[j], gap, skip)
            sc = f[j] + sc0
            if width <= bw and sc > max_f:
                max_f, max_j = sc, j
            if not exact and len(inner) > 0 and yi > 0:
                lower, _ = inner.interval((yi - 1, n))
                if lower is not None:
                    n_skip = 0
                    for node in inner.walk_from(lower.key, reverse=True):
                        qy, j = node.key
                        if qy < yi - max_dist_inner:
                            break
                        sc0, _, width = _simple_score(ai, a[j], gap, skip)
                        if width <= bw:
                            sc = f[j] + sc0
                            if sc > max_f:
                                max_f, max_j = sc, j
                                if n_skip > 0:
                                    n_skip -= 1
                            elif t[j] == i:
                                n_skip += 1
                                if n_skip > max_chn_skip:
                                    break
                            if p[j] >= 0:
                                t[p[j]] = i
        f[i], p[i] = max_f, max_j
    chains, members = chain_backtrack(f, p, min_cnt, min_sc)
    if not chains:
        return ChainResult()
    return _compact(chains, members, a)