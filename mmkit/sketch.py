"""Symmetric (w,k)-minimizer sketching of DNA sequences."""

from __future__ import annotations

from collections import deque
from itertools import chain
from typing import Union

from .misc import Pair128

_U64_MAX = (1 << 64) - 1
_U32_MASK = 0xFFFFFFFF
_EMPTY = (_U64_MAX, _U64_MAX)

_NT4 = {"A": 0, "C": 1, "G": 2, "T": 3, "U": 3, "a": 0, "c": 1, "g": 2, "t": 3, "u": 3}


def hash64(key: int, mask: int) -> int:
    """Invertible integer hash of ``key`` restricted to the bits of ``mask``."""
    key = ((~key & _U64_MAX) + (key << 21)) & mask
    key = key ^ key >> 24
    key = ((key + (key << 3)) + (key << 8)) & mask
    key = key ^ key >> 14
    key = ((key + (key << 2)) + (key << 4)) & mask
    key = key ^ key >> 28
    key = (key + (key << 31)) & mask
    return key


def sketch(
    seq: Union[str, bytes],
    w: int,
    k: int,
    rid: int = 0,
    is_hpc: bool = False,
) -> list[Pair128]:
    """Find the symmetric (w,k)-minimizers of a DNA sequence.

    Each minimizer is a :class:`Pair128` with ``x = hash << 8 | span`` and
    ``y = rid << 32 | last_pos << 1 | strand``, where ``last_pos`` is the
    position of the last base of the k-mer. With ``is_hpc`` homopolymer runs
    are compressed to one base. Raises ``ValueError`` for an empty sequence,
    ``w`` outside 1..255 or ``k`` outside 1..28.
    """
    if isinstance(seq, (bytes, bytearray)):
        seq = bytes(seq).decode("latin-1")
    codes = [_NT4.get(ch, 4) for ch in seq]
    n = len(codes)
    if n <= 0:
        raise ValueError("sequence must not be empty")
    if not 0 < w < 256:
        raise ValueError("w must be within 1 and 255")
    if not 0 < k <= 28:
        raise ValueError("k must be within 1 and 28")

    shift1 = 2 * (k - 1)
    mask = (1 << 2 * k) - 1
    fwd = rev = 0
    buf: list[tuple[int, int]] = [_EMPTY] * w
    runs: deque[int] = deque()
    out: list[tuple[int, int]] = []
    mn = _EMPTY
    l = buf_pos = min_pos = kmer_span = 0

    i = 0
    while i < n:
        c = codes[i]
        info = _EMPTY
        if c < 4:
            if is_hpc:
                skip_len = 1
                if i + 1 < n and codes[i + 1] == c:
                    skip_len = 2
                    while i + skip_len < n and codes[i + skip_len] == c:
                        skip_len += 1
                    i += skip_len - 1
                runs.append(skip_len)
                kmer_span += skip_len
                if len(runs) > k:
                    kmer_span -= runs.popleft()
            else:
                kmer_span = min(l + 1, k)
            fwd = ((fwd << 2) | c) & mask
            rev = (rev >> 2) | ((3 ^ c) << shift1)
            if fwd == rev:  # strand of a symmetric k-mer is unknown
                i += 1
                continue
            z = 0 if fwd < rev else 1
            l += 1
            if l >= k and kmer_span < 256:
                canonical = rev if z else fwd
                info = (
                    hash64(canonical, mask) << 8 | kmer_span,
                    (rid << 32) | ((i << 1) & _U32_MASK) | z,
                )
        else:
            l = 0
            runs.clear()
            kmer_span = 0
        buf[buf_pos] = info
        if l == w + k - 1 and mn[0] != _U64_MAX:
            # first full window: identical k-mers were not stored yet
            for j in chain(range(buf_pos + 1, w), range(buf_pos)):
                if mn[0] == buf[j][0] and buf[j][1] != mn[1]:
                    out.append(buf[j])
        if info[0] <= mn[0]:
            if l >= w + k and mn[0] != _U64_MAX:
                out.append(mn)
            mn, min_pos = info, buf_pos
        elif buf_pos == min_pos:  # the old minimum left the window
            if l >= w + k - 1 and mn[0] != _U64_MAX:
                out.append(mn)
            mn = (_U64_MAX, mn[1])
            for j in chain(range(buf_pos + 1, w), range(buf_pos + 1)):
                if mn[0] >= buf[j][0]:
                    mn, min_pos = buf[j], j
            if l >= w + k - 1 and mn[0] != _U64_MAX:
                for j in chain(range(buf_pos + 1, w), range(buf_pos + 1)):
                    if mn[0] == buf[j][0] and mn[1] != buf[j][1]:
                        out.append(buf[j])
        buf_pos += 1
        if buf_pos == w:
            buf_pos = 0
        i += 1
    if mn[0] != _U64_MAX:
        out.append(mn)
    return [Pair128(x, y) for x, y in out]