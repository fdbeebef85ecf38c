# mmkit

`mmkit` is a pure-Python toolkit with the core pieces of a long-read
sequence mapper. Each piece works on its own, so you can use the ones you
need:

| Module           | What it does                                                        |
|------------------|---------------------------------------------------------------------|
| `mmkit.sketch`   | Symmetric (w,k)-minimizers of a DNA sequence, with optional homopolymer compression |
| `mmkit.sdust`    | SDUST masking of low-complexity regions, a FASTA/FASTQ reader and the `sdust` command |
| `mmkit.seed`     | Turning minimizers into seed matches and filtering repetitive ones  |
| `mmkit.lchain`   | Colinear chaining of anchors, by dynamic programming or with range-minimum queries |
| `mmkit.rmq`      | A balanced search tree that answers range-minimum queries           |
| `mmkit.pe`       | Pairing the hits of the two ends of a paired-end read               |
| `mmkit.ksw_ll`   | Striped local alignment that reports the best score and end points  |
| `mmkit.options`  | Indexing and mapping options, presets and option checks             |
| `mmkit.ketopt`   | A getopt-style command-line parser with long options                |
| `mmkit.hashing`  | Integer and string hash functions                                   |
| `mmkit.misc`     | Timers, peak memory use and sorting of 128-bit pairs                |

It needs Python 3.10 or later and nothing outside the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Masking low-complexity regions from the command line

The `sdust` command reads a FASTA or FASTQ file, plain or gzipped (`-`
reads standard input), and prints one line per masked interval: the
sequence name, the start and the end of the interval, separated by tabs.
Coordinates are 0-based and the end is exclusive.

```
sdust [-w 64] [-t 20] input.fa
```

`-w` sets the window size and `-t` the score threshold; the values shown
are the defaults. Run without an input file, it prints its usage and exits
with status 1; a bad option also exits with status 1.

## Using the library

### Minimizers

```python
from mmkit.sketch import sketch

minimizers = sketch("ACGTTGCAAGGCTTAACCGGTTAAGCTAGCTAGGATCC", w=5, k=11, rid=0, is_hpc=False)
```

Each minimizer is a `Pair128`: `x` is `hash << 8 | span` and `y` is
`rid << 32 | last_pos << 1 | strand`. `sketch` raises `ValueError` for an
empty sequence, `w` outside 1..255 or `k` outside 1..28.

### Low-complexity intervals

```python
from mmkit.sdust import sdust

intervals = sdust("ACGT" + "CA" * 40 + "GGTACCTTAG", threshold=20, window=64)
```

The result is a list of half-open `(start, end)` pairs.

### Seeds and chains

`mmkit.seed.collect_matches` takes an index as a plain mapping from
minimizer hash (`x >> 8`) to a sequence of occurrences, looks up each
minimizer, filters the repetitive ones and returns a `MatchResult` with the
kept seeds, the anchor count, the repeat length and the seed positions.

`mmkit.lchain.chain_dp` and `mmkit.lchain.chain_rmq` chain anchors sorted
by `x` and return a `ChainResult`; iterating it yields `(score, anchors)`
for each chain.

### Presets and option checks

```python
from mmkit.options import IndexOptions, MapOptions, apply_preset, check_options, ConfigError

iopt, mopt = IndexOptions(), MapOptions()
apply_preset("map-hifi", iopt, mopt)
try:
    warnings = check_options(iopt, mopt)
except ConfigError as err:
    print(f"bad options: {err} (code {err.code})")
```

An unknown preset name raises `ConfigError`, as does any inconsistent
combination of options; `check_options` otherwise returns its warnings.

### Range-minimum queries

```python
from mmkit.rmq import RmqTree

tree = RmqTree()
for key, pri in [(5, 3.0), (1, 7.5), (9, -2.0), (4, 0.5)]:
    tree.insert(key, pri)

smallest = tree.rmq(1, 5)   # the node of lowest priority with a key in [1, 5]
```

The tree also offers `find`, `interval`, `erase`, `erase_first`,
`walk_from`, `len()` and in-order iteration.

### Paired ends

`mmkit.pe.pair` takes the `Region` lists of both ends, picks the best
proper pair and adjusts mapping qualities in place; `set_pe_thru` marks
read-through pairs.

### Local alignment

```python
from mmkit.ksw_ll import make_profile

m = 5
mat = [(2 if i == j else -4) if i < 4 and j < 4 else 0 for i in range(m) for j in range(m)]
query = [0, 1, 2, 3, 0, 1, 2, 3]
profile = make_profile(2, query, m, mat)
hit = profile.align_i16([3, 0, 1, 2, 3, 0, 1], gapo=4, gape=2)
print(hit.score, hit.qe, hit.te)
```

### Command-line parsing

```python
from mmkit.ketopt import ArgKind, LongOption, parse_options

longopts = [LongOption("threads", ArgKind.REQUIRED, "t")]
options, positionals = parse_options(["prog", "-t", "4", "ref.fa"], "t:", longopts, True)
```

Unknown or ambiguous options raise `UnknownOptionError` and options
missing their argument raise `MissingArgumentError`; both derive from
`OptionError`.

## What the package does not do

`mmkit` provides the pieces, not a mapper. It has no command that maps
reads against a reference, builds, saves or loads an index, or writes SAM
or PAF output; the only command is `sdust`. Seeding works on an index you
supply as a Python mapping, and all work runs in a single thread.