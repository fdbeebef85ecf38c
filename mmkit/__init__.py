"""Minimizer sketching, masking, seeding, chaining, pairing and alignment for sequence mapping."""

__version__ = "0.1.0"

__all__ = [
    "hashing",
    "ketopt",
    "ksw_ll",
    "lchain",
    "misc",
    "options",
    "pe",
    "rmq",
    "sdust",
    "seed",
    "sketch",
]