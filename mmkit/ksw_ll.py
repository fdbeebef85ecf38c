"""Striped local alignment with 16-bit saturating scores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

_LANES = 8


def _sat16(x: int) -> int:
    return -32768 if x < -32768 else 32767 if x > 32767 else x


def _signed16(x: int) -> int:
    return x - 0x10000 if x & 0x8000 else x


def _subs(v: list[int], b: int) -> list[int]:
    """Unsigned saturating subtraction of ``b`` from each 16-bit lane."""
    return [_signed16(max((x & 0xFFFF) - b, 0)) for x in v]


def _vmax(a: list[int], b: list[int]) -> list[int]:
    return [x if x > y else y for x, y in zip(a, b)]


def _shift_lanes(v: list[int]) -> list[int]:
    return [0] + v[:-1]


@dataclass(frozen=True)
class LocalHit:
    """Best local score and the query and target positions where it ends."""

    score: int
    qe: int
    te: int


@dataclass
class QueryProfile:
    """Striped query profile: ``qp[c][i][k]`` scores letter ``c`` at query position ``i + k * slen``."""

    qlen: int
    slen: int
    size: int
    shift: int
    mdiff: int
    max_sc: int
    qp: list[list[list[int]]]

    def align_i16(self, target: Sequence[int], gapo: int, gape: int) -> LocalHit:
        """Local alignment of ``target`` against the query with affine gaps.

        Needs a profile of size 2. A gap of length ``l`` costs ``gapo + l * gape``.
        """
        if self.size != 2:
            raise ValueError("align_i16 needs a profile made with size 2")
        slen = self.slen
        goe = (gapo + gape) & 0xFFFF
        ge = gape & 0xFFFF
        zero = [0] * _LANES
        E = [zero[:] for _ in range(slen)]
        H0 = [zero[:] for _ in range(slen)]
        H1 = [zero[:] for _ in range(slen)]
        Hmax = [zero[:] for _ in range(slen)]
        gmax, qe, te = 0, -1, -1
        for i, c in enumerate(target):
            S = self.qp[c]
            f = zero[:]
            mx = zero[:]
            h = _shift_lanes(H0[slen - 1])
            for j in range(slen):
                h = [_sat16(x + y) for x, y in zip(h, S[j])]
                e = E[j]
                h = _vmax(_vmax(h, e), f)
                mx = _vmax(mx, h)
                H1[j] = h
                h = _subs(h, goe)
                e = _vmax(_subs(e, ge), h)
                E[j] = e
                f = _vmax(_subs(f, ge), h)
                h = H0[j]
            converged = False
            for _ in range(_LANES):
                f = _shift_lanes(f)
                for j in range(slen):
                    h = _vmax(H1[j], f)
                    H1[j] = h
                    h = _subs(h, goe)
                    f = _subs(f, ge)
                    if not any(x > y for x, y in zip(f, h)):
                        converged = True
                        break
                if converged:
                    break
            imax = max(mx) & 0xFFFF
            if imax >= gmax:
                gmax, te = imax, i
                Hmax = list(H1)
            H0, H1 = H1, H0
        for idx in range(slen * _LANES):
            if Hmax[idx // _LANES][idx % _LANES] & 0xFFFF == gmax:
                qe = idx // _LANES + idx % _LANES * slen
        return LocalHit(gmax, qe, te)


def make_profile(size: int, query: Sequence[int], m: int, mat: Sequence[int]) -> QueryProfile:
    """Build the striped profile of ``query`` for an ``m``-letter alphabet.

    ``mat`` is the ``m * m`` scoring matrix, row by row. ``size`` is the score
    width in bytes: 1 stores shifted unsigned bytes, anything larger 16-bit scores.
    """
    if len(mat) < m * m:
        raise ValueError("scoring matrix must hold m * m entries")
    size = 2 if size > 1 else 1
    p = 8 * (3 - size)
    qlen = len(query)
    slen = (qlen + p - 1) // p
    shift, mdiff = 127, 0
    for v in mat[:m * m]:
        if v < shift:
            shift = v
        if v > mdiff:
            mdiff = v
    max_sc = mdiff & 0xFF
    shift = (256 - (shift & 0xFF)) & 0xFF
    mdiff = (mdiff + shift) & 0xFF
    qp: list[list[list[int]]] = []
    for a in range(m):
        row = mat[a * m:(a + 1) * m]
        vectors = []
        for i in range(slen):
            lanes = []
            for k in range(i, slen * p, slen):
                v = 0 if k >= qlen else row[query[k]]
                lanes.append((v + shift) & 0xFF if size == 1 else v)
            vectors.append(lanes)
        qp.append(vectors)
    return QueryProfile(qlen, slen, size, shift, mdiff, max_sc, qp)