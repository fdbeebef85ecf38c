"""Indexing and mapping options, presets and their consistency checks."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, fields
from typing import Optional

logger = logging.getLogger(__name__)


class IndexFlag(enum.IntFlag):
    """Flags that change how an index is built."""

    HPC = 0x1
    NO_SEQ = 0x2
    NO_NAME = 0x4


class MapFlag(enum.IntFlag):
    """Flags that change how reads are mapped and reported."""

    NO_DIAG = 0x001
    NO_DUAL = 0x002
    CIGAR = 0x004
    OUT_SAM = 0x008
    NO_QUAL = 0x010
    OUT_CG = 0x020
    OUT_CS = 0x040
    SPLICE = 0x080
    SPLICE_FOR = 0x100
    SPLICE_REV = 0x200
    NO_LJOIN = 0x400
    OUT_CS_LONG = 0x800
    SR = 0x1000
    FRAG_MODE = 0x2000
    NO_PRINT_2ND = 0x4000
    TWO_IO_THREADS = 0x8000
    LONG_CIGAR = 0x10000
    INDEPEND_SEG = 0x20000
    SPLICE_FLANK = 0x40000
    SOFTCLIP = 0x80000
    FOR_ONLY = 0x100000
    REV_ONLY = 0x200000
    HEAP_SORT = 0x400000
    ALL_CHAINS = 0x800000
    OUT_MD = 0x1000000
    COPY_COMMENT = 0x2000000
    EQX = 0x4000000
    PAF_NO_HIT = 0x8000000
    NO_END_FLT = 0x10000000
    HARD_MLEVEL = 0x20000000
    SAM_HIT_ONLY = 0x40000000
    RMQ = 0x80000000


class ConfigError(ValueError):
    """An unknown preset or an inconsistent set of options; ``code`` tells which check failed."""

    def __init__(self, message: str, code: int = -1):
        super().__init__(message)
        self.code = code


@dataclass
class IndexOptions:
    """Options for building an index."""

    k: int = 15
    w: int = 10
    flag: IndexFlag = IndexFlag(0)
    bucket_bits: int = 14
    mini_batch_size: int = 50000000
    batch_size: int = 4000000000


@dataclass
class MapOptions:
    """Options for mapping reads against an index."""

    flag: MapFlag = MapFlag(0)
    seed: int = 11
    sdust_thres: int = 0

    max_qlen: int = 0

    bw: int = 500
    bw_long: int = 20000
    max_gap: int = 5000
    max_gap_ref: int = -1
    max_frag_len: int = 0
    max_chain_skip: int = 25
    max_chain_iter: int = 5000
    min_cnt: int = 3
    min_chain_score: int = 40
    chain_gap_scale: float = 0.8
    rmq_size_cap: int = 100000
    rmq_inner_dist: int = 1000
    rmq_rescue_size: int = 1000
    rmq_rescue_ratio: float = 0.1

    mask_level: float = 0.5
    mask_len: int = 2147483647
    pri_ratio: float = 0.8
    best_n: int = 5

    alt_drop: float = 0.15

    a: int = 2
    b: int = 4
    q: int = 4
    e: int = 2
    q2: int = 24
    e2: int = 1
    sc_ambi: int = 1
    noncan: int = 0
    junc_bonus: int = 0
    zdrop: int = 400
    zdrop_inv: int = 200
    end_bonus: int = -1
    min_dp_max: Optional[int] = None
    min_ksw_len: int = 200
    anchor_ext_len: int = 20
    anchor_ext_shift: int = 6
    max_clip_ratio: float = 1.0

    pe_ori: int = 0
    pe_bonus: int = 33

    mid_occ_frac: float = 2e-4
    min_mid_occ: int = 10
    max_mid_occ: int = 1000000
    mid_occ: int = 0
    max_occ: int = 0
    max_max_occ: int = 4095
    occ_dist: int = 500
    mini_batch_size: int = 500000000
    max_sw_mat: int = 100000000

    split_prefix: Optional[str] = None

    def __post_init__(self) -> None:
        if self.min_dp_max is None:
            self.min_dp_max = self.min_chain_score * self.a

    def set_max_intron_len(self, max_intron_len: int) -> None:
        """In splice mode, use ``max_intron_len`` as the reference gap and both bandwidths."""
        if (self.flag & MapFlag.SPLICE) and max_intron_len > 0:
            self.max_gap_ref = self.bw = self.bw_long = max_intron_len

    def update(self, computed_max_occ: int) -> None:
        """Finish the options once the index is known.

        ``computed_max_occ`` is the occurrence threshold derived from the index
        for ``mid_occ_frac``; it is used, clamped to ``min_mid_occ`` and
        ``max_mid_occ``, only when ``mid_occ`` is not set.
        """
        if self.flag & (MapFlag.SPLICE_FOR | MapFlag.SPLICE_REV):
            self.flag |= MapFlag.SPLICE
        if self.mid_occ <= 0:
            self.mid_occ = computed_max_occ
            if self.mid_occ < self.min_mid_occ:
                self.mid_occ = self.min_mid_occ
            if self.max_mid_occ > self.min_mid_occ and self.mid_occ > self.max_mid_occ:
                self.mid_occ = self.max_mid_occ
        logger.info("mid_occ = %d", self.mid_occ)


def _reset(obj: object, fresh: object) -> None:
    for f in fields(fresh):  # type: ignore[arg-type]
        setattr(obj, f.name, getattr(fresh, f.name))


_ASM_SCORES = {
    "asm5": dict(a=1, b=19, q=39, q2=81, e=3, e2=1),
    "asm10": dict(a=1, b=9, q=16, q2=41, e=2, e2=1),
    "asm20": dict(a=1, b=4, q=6, q2=26, e=2, e2=1),
}


def apply_preset(preset: Optional[str], iopt: IndexOptions, mopt: MapOptions) -> None:
    """Apply a named preset to the options in place.

    ``None`` resets both to their defaults. Raises :class:`ConfigError` for
    an unknown preset.
    """
    io, mo = iopt, mopt
    if preset is None:
        _reset(io, IndexOptions())
        _reset(mo, MapOptions())
    elif preset == "map-ont":
        pass
    elif preset == "ava-ont":
        io.flag, io.k, io.w = IndexFlag(0), 15, 5
        mo.flag |= MapFlag.ALL_CHAINS | MapFlag.NO_DIAG | MapFlag.NO_DUAL | MapFlag.NO_LJOIN
        mo.min_chain_score, mo.pri_ratio, mo.max_chain_skip = 100, 0.0, 25
        mo.bw = mo.bw_long = 2000
        mo.occ_dist = 0
    elif preset in ("map10k", "map-pb"):
        io.flag |= IndexFlag.HPC
        io.k = 19
    elif preset == "ava-pb":
        io.flag |= IndexFlag.HPC
        io.k, io.w = 19, 5
        mo.flag |= MapFlag.ALL_CHAINS | MapFlag.NO_DIAG | MapFlag.NO_DUAL | MapFlag.NO_LJOIN
        mo.min_chain_score, mo.pri_ratio, mo.max_chain_skip = 100, 0.0, 25
        mo.bw_long = mo.bw
        mo.occ_dist = 0
    elif preset in ("map-hifi", "map-ccs"):
        io.flag, io.k, io.w = IndexFlag(0), 19, 19
        mo.max_gap = 10000
        mo.a, mo.b, mo.q, mo.q2, mo.e, mo.e2 = 1, 4, 6, 26, 2, 1
        mo.occ_dist = 500
        mo.min_mid_occ, mo.max_mid_occ = 50, 500
        mo.min_dp_max = 200
    elif preset.startswith("asm"):
        scores = _ASM_SCORES.get(preset)
        if scores is None:
            raise ConfigError(f"unknown preset '{preset}'")
        io.flag, io.k, io.w = IndexFlag(0), 19, 19
        mo.bw = mo.bw_long = 100000
        mo.max_gap = 10000
        mo.flag |= MapFlag.RMQ
        mo.min_mid_occ, mo.max_mid_occ = 50, 500
        mo.min_dp_max = 200
        mo.best_n = 50
        for name, value in scores.items():
            setattr(mo, name, value)
        mo.zdrop = mo.zdrop_inv = 200
        if preset == "asm20":
            io.w = 10
    elif preset in ("short", "sr"):
        io.flag, io.k, io.w = IndexFlag(0), 21, 11
        mo.flag |= (MapFlag.SR | MapFlag.FRAG_MODE | MapFlag.NO_PRINT_2ND
                    | MapFlag.TWO_IO_THREADS | MapFlag.HEAP_SORT)
        mo.pe_ori = 0 << 1 | 1  # FR
        mo.a, mo.b, mo.q, mo.e, mo.q2, mo.e2 = 2, 8, 12, 2, 24, 1
        mo.zdrop = mo.zdrop_inv = 100
        mo.end_bonus = 10
        mo.max_frag_len = 800
        mo.max_gap = 100
        mo.bw = mo.bw_long = 100
        mo.pri_ratio = 0.5
        mo.min_cnt = 2
        mo.min_chain_score = 25
        mo.min_dp_max = 40
        mo.best_n = 20
        mo.mid_occ = 1000
        mo.max_occ = 5000
        mo.mini_batch_size = 50000000
    elif preset.startswith("splice") or preset == "cdna":
        io.flag, io.k, io.w = IndexFlag(0), 15, 5
        mo.flag |= MapFlag.SPLICE | MapFlag.SPLICE_FOR | MapFlag.SPLICE_REV | MapFlag.SPLICE_FLANK
        mo.max_sw_mat = 0
        mo.max_gap = 2000
        mo.max_gap_ref = mo.bw = mo.bw_long = 200000
        mo.a, mo.b, mo.q, mo.e, mo.q2, mo.e2 = 1, 2, 2, 1, 32, 0
        mo.noncan = 9
        mo.junc_bonus = 9
        mo.zdrop, mo.zdrop_inv = 200, 100
        if preset == "splice:hq":
            mo.junc_bonus, mo.b, mo.q, mo.q2 = 5, 4, 6, 24
    else:
        raise ConfigError(f"unknown preset '{preset}'")


def check_options(iopt: IndexOptions, mopt: MapOptions) -> list[str]:
    """Check that the options are consistent.

    Raises :class:`ConfigError` at the first violation; otherwise returns the
    warnings, if any.
    """
    io, mo = iopt, mopt
    warnings: list[str] = []
    if mo.bw > mo.bw_long:
        raise ConfigError(
            f"with '-rNUM1,NUM2', NUM1 ({mo.bw}) can't be larger than NUM2 ({mo.bw_long})", -8)
    if (mo.flag & MapFlag.RMQ) and (mo.flag & (MapFlag.SR | MapFlag.SPLICE)):
        raise ConfigError("--rmq doesn't work with --sr or --splice", -7)
    if mo.split_prefix and (mo.flag & (MapFlag.OUT_CS | MapFlag.OUT_MD)):
        raise ConfigError("--cs or --MD doesn't work with --split-prefix", -6)
    if io.k <= 0 or io.w <= 0:
        raise ConfigError("-k and -w must be positive", -5)
    if mo.best_n < 0:
        raise ConfigError("-N must be no less than 0", -4)
    if mo.best_n == 0:
        message = "'-N 0' reduces mapping accuracy. Please use '--secondary=no' instead."
        logger.warning(message)
        warnings.append(message)
    if mo.pri_ratio < 0.0 or mo.pri_ratio > 1.0:
        raise ConfigError("-p must be within 0 and 1 (including 0 and 1)", -4)
    if (mo.flag & MapFlag.FOR_ONLY) and (mo.flag & MapFlag.REV_ONLY):
        raise ConfigError("--for-only and --rev-only can't be applied at the same time", -3)
    if mo.e <= 0 or mo.q <= 0:
        raise ConfigError("-O and -E must be positive", -1)
    if (mo.q != mo.q2 or mo.e != mo.e2) and not (mo.e > mo.e2 and mo.q + mo.e < mo.q2 + mo.e2):
        raise ConfigError("dual gap penalties violating E1>E2 and O1+E1<O2+E2", -2)
    if (mo.q + mo.e) + (mo.q2 + mo.e2) > 127:
        raise ConfigError("scoring system violating ({-O}+{-E})+({-O2}+{-E2}) <= 127", -1)
    if mo.zdrop < mo.zdrop_inv:
        raise ConfigError("Z-drop should not be less than inversion-Z-drop", -5)
    if (mo.flag & MapFlag.NO_PRINT_2ND) and (mo.flag & MapFlag.ALL_CHAINS):
        raise ConfigError("-X/-P and --secondary=no can't be applied at the same time", -5)
    return warnings