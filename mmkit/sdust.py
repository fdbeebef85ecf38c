"""Symmetric DUST: finding low-complexity regions in DNA sequences."""

from __future__ import annotations

import gzip
import io
import sys
from collections import deque
from dataclasses import dataclass
from itertools import chain
from typing import BinaryIO, Iterator, Optional, Sequence, Union

from .ketopt import OptionError, parse_options

SD_WLEN = 3
SD_WTOT = 1 << (SD_WLEN << 1)
SD_WMSK = SD_WTOT - 1

_NT4 = {"A": 0, "C": 1, "G": 2, "T": 3, "U": 3, "a": 0, "c": 1, "g": 2, "t": 3, "u": 3}


@dataclass(slots=True)
class _PerfectInterval:
    start: int
    finish: int
    r: int
    l: int


class _Scanner:
    """State of one scan over a sequence."""

    def __init__(self, threshold: int, window: int):
        self.T = threshold
        self.W = window
        self.w: deque[int] = deque()
        self.perfect: list[_PerfectInterval] = []  # descending start, then ascending finish
        self.res: list[tuple[int, int]] = []
        self.cv = [0] * SD_WTOT
        self.cw = [0] * SD_WTOT
        self.rv = self.rw = self.L = 0

    def save_masked_regions(self, start: int) -> None:
        P = self.perfect
        if not P or P[-1].start >= start:
            return
        p = P[-1]
        if self.res and p.start <= self.res[-1][1]:
            s, f = self.res[-1]
            self.res[-1] = (s, max(f, p.finish))
        else:
            self.res.append((p.start, p.finish))
        while P and P[-1].start < start:
            P.pop()

    def shift_window(self, t: int) -> None:
        w, cv, cw = self.w, self.cv, self.cw
        if len(w) >= self.W - SD_WLEN + 1:
            s = w.popleft()
            cw[s] -= 1
            self.rw -= cw[s]
            if self.L > len(w):
                self.L -= 1
                cv[s] -= 1
                self.rv -= cv[s]
        w.append(t)
        self.L += 1
        self.rw += cw[t]
        cw[t] += 1
        self.rv += cv[t]
        cv[t] += 1
        if cv[t] * 10 > self.T << 1:
            while True:
                s = w[len(w) - self.L]
                cv[s] -= 1
                self.rv -= cv[s]
                self.L -= 1
                if s == t:
                    break

    def find_perfect(self, start: int) -> None:
        c = list(self.cv)
        r = self.rv
        max_r = max_l = 0
        n = len(self.w)
        P = self.perfect
        for i in range(n - self.L - 1, -1, -1):
            t = self.w[i]
            r += c[t]
            c[t] += 1
            new_r, new_l = r, n - i - 1
            if new_r * 10 <= self.T * new_l:
                continue
            pos = len(P)
            for j, p in enumerate(P):
                if p.start < i + start:
                    pos = j
                    break
                if max_r == 0 or p.r * max_l > max_r * p.l:
                    max_r, max_l = p.r, p.l
            if max_r == 0 or new_r * max_l >= max_r * new_l:
                max_r, max_l = new_r, new_l
                P.insert(pos, _PerfectInterval(i + start, n + (SD_WLEN - 1) + start, new_r, new_l))

    def run(self, seq: str) -> list[tuple[int, int]]:
        l = t = 0
        codes = (_NT4.get(ch, 4) for ch in seq)
        for i, b in enumerate(chain(codes, (4,))):
            if b < 4:
                l += 1
                t = ((t << 2) | b) & SD_WMSK
                if l >= SD_WLEN:
                    start = max(l - self.W, 0) + (i + 1 - l)
                    self.save_masked_regions(start)
                    self.shift_window(t)
                    if self.rw * 10 > self.L * self.T:
                        self.find_perfect(start)
            else:
                start = max(l - self.W + 1, 0) + (i + 1 - l)
                while self.perfect:
                    self.save_masked_regions(start)
                    start += 1
                l = t = 0
        return self.res


def sdust(seq: Union[str, bytes], threshold: int = 20, window: int = 64) -> list[tuple[int, int]]:
    """Return the low-complexity regions of ``seq`` as half-open ``(start, end)`` pairs."""
    if isinstance(seq, (bytes, bytearray)):
        seq = bytes(seq).decode("latin-1")
    return _Scanner(threshold, window).run(seq)


def _open_binary(path: str) -> BinaryIO:
    raw: BinaryIO = sys.stdin.buffer if path == "-" else open(path, "rb")
    buffered = io.BufferedReader(raw) if not hasattr(raw, "peek") else raw
    if buffered.peek(2)[:2] == b"\x1f\x8b":
        return gzip.GzipFile(fileobj=buffered)  # type: ignore[return-value]
    return buffered


def read_fasta(path: str) -> Iterator[tuple[str, str]]:
    """Yield ``(name, sequence)`` from a FASTA or FASTQ file, gzipped or not; ``-`` is stdin."""
    stream = _open_binary(path)
    try:
        lines = (ln.decode("latin-1").rstrip("\r\n") for ln in stream)
        header: Optional[str] = None
        for line in lines:
            if line.startswith((">", "@")):
                header = line
                break
        while header is not None:
            fields = header[1:].split(None, 1)
            name = fields[0] if fields else ""
            is_fastq = header.startswith("@")
            parts: list[str] = []
            header = None
            for line in lines:
                if line.startswith(">") or (line.startswith("@") and not is_fastq):
                    header = line
                    break
                if is_fastq and line.startswith("+"):
                    seq_len = sum(len(p) for p in parts)
                    qual = 0
                    for qline in lines:
                        qual += len(qline)
                        if qual >= seq_len:
                            break
                    for nxt in lines:
                        if nxt.startswith(("@", ">")):
                            header = nxt
                            break
                    break
                parts.append(line.strip())
            yield name, "".join(parts)
    finally:
        if stream is not sys.stdin.buffer:
            stream.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the low-complexity regions of every sequence in a file."""
    args = list(sys.argv[1:] if argv is None else argv)
    window, threshold = 64, 20
    try:
        opts, positionals = parse_options(["sdust", *args], "w:t:")
        for o in opts:
            if o.opt == "w":
                window = int(o.arg)
            elif o.opt == "t":
                threshold = int(o.arg)
    except (OptionError, ValueError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    if not positionals:
        print(f"Usage: sdust [-w {window}] [-t {threshold}] <in.fa>", file=sys.stderr)
        return 1
    for name, seq in read_fasta(positionals[0]):
        for start, end in sdust(seq, threshold, window):
            print(f"{name}\t{start}\t{end}")
    return 0