"""Pairing of the alignments of the two ends of a paired-end read."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Sequence

_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1


def _f32(x: float) -> float:
    return struct.unpack("<f", struct.pack("<f", x))[0]


_F602 = _f32(6.02)
_F4343 = _f32(4.343)
_F02 = _f32(0.2)
_F08 = _f32(0.8)
_F0499 = _f32(0.499)


@dataclass
class Region:
    """One alignment of a read segment; ``id`` is its index in the segment's list."""

    id: int = 0
    parent: int = 0
    rid: int = 0
    rev: bool = False
    rs: int = 0
    re: int = 0
    qs: int = 0
    qe: int = 0
    score: int = 0
    hash: int = 0
    mapq: int = 0
    dp_max: int = 0
    sam_pri: bool = False
    proper_frag: bool = False
    pe_thru: bool = False


def set_pe_thru(qlens: Sequence[int], regs: Sequence[Sequence[Region]]) -> None:
    """Mark the two primaries as read-through when both ends cover the same short insert."""
    pri: list[Region] = []
    for segment in regs[:2]:
        primaries = [r for r in segment if r.id == r.parent]
        if len(primaries) != 1:
            return
        pri.append(primaries[0])
    if len(pri) != 2:
        return
    p, q = pri
    if (p.rid == q.rid and p.rev == q.rev and abs(p.rs - q.rs) < 3 and abs(p.re - q.re) < 3
            and ((p.qs == 0 and qlens[1] - q.qe == 0) or (q.qs == 0 and qlens[0] - p.qe == 0))):
        p.pe_thru = q.pe_thru = True


def pair(
    max_gap_ref: int,
    pe_bonus: int,
    sub_diff: int,
    match_sc: int,
    qlens: Sequence[int],
    regs: Sequence[list[Region]],
) -> None:
    """Choose the best-scoring proper pair of the two ends and adjust mapping qualities.

    ``regs`` holds the alignments of end 1 and end 2; they are updated in place.
    """
    entries: list[tuple[int, int, int, Region]] = []  # (s, rev, key, region)
    dp_thres = 0
    segs = 0
    for s in range(2):
        best = 0
        for r in regs[s]:
            rev = int(bool(r.rev))
            key = ((r.rid << 32) | (r.rs << 1) | (s ^ rev)) & _MASK64
            entries.append((s, rev, key, r))
            best = max(best, r.dp_max)
            segs |= 1 << s
        dp_thres += best
    if segs != 3:
        return  # only one end is mapped
    dp_thres = max(dp_thres - pe_bonus, 0)
    entries.sort(key=lambda e: e[2])

    best_score = -1
    max_idx = [-1, -1]
    last = [-1, -1]
    scores: list[int] = []
    for i, (si, revi, keyi, r) in enumerate(entries):
        if not keyi & 1:  # forward first read or reverse second read
            last[revi] = i
            continue
        if last[revi] < 0:
            continue
        q = entries[last[revi]][3]
        if r.rid != q.rid or r.rs - q.re > max_gap_ref:
            continue
        for j in range(last[revi], -1, -1):
            sj, revj, _, q = entries[j]
            if revj != revi or sj == si:
                continue
            if r.rid != q.rid or r.rs - q.re > max_gap_ref:
                break
            if r.dp_max + q.dp_max < dp_thres:
                continue
            score = ((r.dp_max + q.dp_max) << 32) | ((r.hash + q.hash) & _MASK32)
            if score > best_score:
                best_score = score
                max_idx[sj], max_idx[si] = j, i
            scores.append(score)
    sc = sorted(x & _MASK64 for x in scores)

    if sc and best_score > 0:
        r0, r1 = entries[max_idx[0]][3], entries[max_idx[1]][3]
        chosen = [r0, r1]
        r0.proper_frag = r1.proper_frag = True
        for s in range(2):
            rs = chosen[s]
            if rs.id != rs.parent:  # lift to primary
                p = regs[s][rs.parent]
                for reg in regs[s]:
                    if reg.parent == p.id:
                        reg.parent = rs.id
                p.mapq = 0
            if not rs.sam_pri:
                for reg in regs[s]:
                    reg.sam_pri = False
                rs.sam_pri = True
        mapq_pe = max(r0.mapq, r1.mapq)
        top = (best_score & _MASK64) >> 32
        n_sub = sum(1 for x in sc if (x >> 32) + sub_diff >= top)
        if len(sc) > 1:
            diff = ((best_score >> 32) - (sc[-2] >> 32)) & _MASK64
            alt = _f32(_f32(_F602 * _f32(float(diff))) / _f32(float(match_sc)))
            alt = int(_f32(alt - _f32(_F4343 * _f32(math.log(n_sub)))))
            mapq_pe = min(mapq_pe, alt)
        for r in chosen:
            if r.mapq < mapq_pe:
                r.mapq = int(_f32(_f32(_f32(_F02 * r.mapq) + _f32(_F08 * mapq_pe)) + _F0499))
        if len(sc) == 1:
            for r in chosen:
                r.mapq = max(r.mapq, 2)
        elif top > sc[-2] >> 32:
            for r in chosen:
                r.mapq = max(r.mapq, 1)

    set_pe_thru(qlens, regs)