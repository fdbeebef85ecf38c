import pytest
from hypothesis import given, strategies as st

from mmkit.hashing import int64_hash, int_hash, wang_hash, x31_hash_string


def test_int_hash_is_identity_for_small_keys():
    assert int_hash(5) == 5


def test_int_hash_truncates_to_32_bits():
    assert int_hash(2**32 + 7) == 7


@given(st.integers(min_value=-(2**70), max_value=2**70))
def test_int_hash_range(key):
    assert 0 <= int_hash(key) < 2**32


def test_int64_hash_zero():
    assert int64_hash(0) == 0


@given(st.integers(min_value=0, max_value=2**64 - 1))
def test_int64_hash_range_and_wraparound(key):
    h = int64_hash(key)
    assert 0 <= h < 2**32
    assert int64_hash(key + 2**64) == h


def test_int64_hash_uses_high_bits():
    assert int64_hash(1 << 40) != int64_hash(0) or int64_hash(1 << 40) > 0
    assert int64_hash(1 << 40) > 0


def test_x31_empty_string():
    assert x31_hash_string("") == 0


def test_x31_single_character_is_its_code():
    assert x31_hash_string("a") == ord("a")


def test_x31_stops_at_nul():
    assert x31_hash_string("abc\0def") == x31_hash_string("abc")
    assert x31_hash_string("\0abc") == 0


@given(st.text(alphabet=st.characters(min_codepoint=1, max_codepoint=127)))
def test_x31_str_and_bytes_agree(text):
    h = x31_hash_string(text)
    assert h == x31_hash_string(text.encode("ascii"))
    assert 0 <= h < 2**32


def test_x31_order_matters():
    assert x31_hash_string("ab") != x31_hash_string("ba")


def test_x31_high_bytes_stay_in_range():
    h = x31_hash_string(b"\xff\xfe\x80")
    assert 0 <= h < 2**32


@given(st.integers(min_value=0, max_value=2**32 - 1))
def test_wang_hash_range_and_wraparound(key):
    h = wang_hash(key)
    assert 0 <= h < 2**32
    assert wang_hash(key + 2**32) == h


def test_wang_hash_is_injective_on_a_range():
    values = {wang_hash(k) for k in range(20000)}
    assert len(values) == 20000


@pytest.mark.parametrize("key", [0, 1, 12345, 2**31, 2**32 - 1])
def test_wang_hash_deterministic(key):
    assert wang_hash(key) == wang_hash(key)
    assert wang_hash(key) == wang_hash(key - 2**32)