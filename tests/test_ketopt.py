import pytest

from mmkit.ketopt import (
    ArgKind,
    LongOption,
    MissingArgumentError,
    OptionError,
    ParsedOption,
    UnknownOptionError,
    parse_options,
)

LONGS = [
    LongOption("bucket-bits", ArgKind.REQUIRED, 300),
    LongOption("cs", ArgKind.OPTIONAL, 316),
    LongOption("sam", ArgKind.NONE, "a"),
    LongOption("splice", ArgKind.NONE, 310),
    LongOption("splice-flank", ArgKind.REQUIRED, 319),
]


def test_short_options_with_attached_and_separate_args():
    opts, pos = parse_options(["prog", "-w5", "-k", "19", "ref.fa"], "w:k:a")
    assert opts == [ParsedOption("w", "5"), ParsedOption("k", "19")]
    assert pos == ["ref.fa"]


def test_short_cluster():
    opts, _ = parse_options(["prog", "-axk", "3"], "axk:")
    assert [o.opt for o in opts] == ["a", "x", "k"]
    assert opts[2].arg == "3"


def test_permute_collects_positionals():
    opts, pos = parse_options(["prog", "a.fa", "-a", "b.fa", "-t", "4"], "at:")
    assert pos == ["a.fa", "b.fa"]
    assert opts == [ParsedOption("a"), ParsedOption("t", "4")]


def test_no_permute_stops_at_first_positional():
    opts, pos = parse_options(["prog", "-a", "x.fa", "-t", "4"], "at:", permute=False)
    assert opts == [ParsedOption("a")]
    assert pos == ["x.fa", "-t", "4"]


def test_double_dash_ends_options():
    opts, pos = parse_options(["prog", "-a", "--", "-t", "q"], "at:")
    assert opts == [ParsedOption("a")]
    assert pos == ["-t", "q"]


def test_single_dash_is_positional():
    _, pos = parse_options(["prog", "-", "-a"], "a")
    assert pos == ["-"]


def test_long_exact_and_prefix():
    opts, _ = parse_options(["prog", "--bucket=10", "--sam"], "a", LONGS)
    assert opts[0] == ParsedOption(300, "10", 0)
    assert opts[1] == ParsedOption("a", None, 2)


def test_long_exact_beats_prefix():
    opts, _ = parse_options(["prog", "--splice"], "", LONGS)
    assert opts == [ParsedOption(310, None, 3)]


def test_long_required_takes_next_word():
    opts, pos = parse_options(["prog", "--bucket-bits", "14", "x"], "", LONGS)
    assert opts == [ParsedOption(300, "14", 0)]
    assert pos == ["x"]


def test_long_optional_argument():
    opts, pos = parse_options(["prog", "--cs", "long", "--cs=long"], "", LONGS)
    assert opts[0].arg is None
    assert opts[1].arg == "long"
    assert pos == ["long"]


def test_ambiguous_long_option():
    with pytest.raises(UnknownOptionError):
        parse_options(["prog", "--spl"], "", LONGS)


def test_unknown_long_without_table():
    with pytest.raises(UnknownOptionError):
        parse_options(["prog", "--sam"], "a")


def test_unknown_short_option():
    with pytest.raises(UnknownOptionError) as err:
        parse_options(["prog", "-z"], "a")
    assert err.value.argument == "-z"


def test_missing_short_argument():
    with pytest.raises(MissingArgumentError):
        parse_options(["prog", "-t"], "t:")


def test_missing_long_argument_is_option_error():
    with pytest.raises(OptionError):
        parse_options(["prog", "--bucket-bits"], "", LONGS)