import pytest

from mmkit.options import (
    ConfigError,
    IndexFlag,
    IndexOptions,
    MapFlag,
    MapOptions,
    apply_preset,
    check_options,
)

PRESETS = ["map-ont", "ava-ont", "map-pb", "map10k", "ava-pb", "map-hifi", "map-ccs",
           "asm5", "asm10", "asm20", "sr", "short", "splice", "splice:hq", "cdna"]


def test_index_defaults():
    io = IndexOptions()
    assert io.k == 15
    assert io.w == 10
    assert io.bucket_bits == 14
    assert io.batch_size == 4000000000


def test_map_defaults():
    mo = MapOptions()
    assert mo.bw == 500
    assert mo.bw_long == 20000
    assert mo.min_dp_max == mo.min_chain_score * mo.a
    assert mo.flag == MapFlag(0)


@pytest.mark.parametrize("preset", PRESETS)
def test_presets_pass_checks(preset):
    io, mo = IndexOptions(), MapOptions()
    apply_preset(preset, io, mo)
    assert check_options(io, mo) == []


def test_sr_preset():
    io, mo = IndexOptions(), MapOptions()
    apply_preset("sr", io, mo)
    assert (io.k, io.w) == (21, 11)
    assert mo.flag & MapFlag.SR
    assert mo.flag & MapFlag.FRAG_MODE
    assert mo.pe_ori == 1
    assert mo.max_frag_len == 800


def test_asm5_preset():
    io, mo = IndexOptions(), MapOptions()
    apply_preset("asm5", io, mo)
    assert (mo.a, mo.b, mo.q, mo.q2) == (1, 19, 39, 81)
    assert mo.zdrop == mo.zdrop_inv == 200
    assert mo.flag & MapFlag.RMQ


def test_asm20_window():
    io, mo = IndexOptions(), MapOptions()
    apply_preset("asm20", io, mo)
    assert io.w == 10
    assert io.k == 19


def test_map_pb_sets_hpc():
    io, mo = IndexOptions(), MapOptions()
    apply_preset("map-pb", io, mo)
    assert io.flag & IndexFlag.HPC
    assert io.k == 19


def test_splice_prefix_and_hq():
    io, mo = IndexOptions(), MapOptions()
    apply_preset("splice:hq", io, mo)
    assert mo.junc_bonus == 5
    assert mo.b == 4
    io2, mo2 = IndexOptions(), MapOptions()
    apply_preset("splice-anything", io2, mo2)
    assert mo2.junc_bonus == 9
    assert mo2.flag & MapFlag.SPLICE


@pytest.mark.parametrize("preset", ["asm7", "unknown", "map"])
def test_unknown_preset(preset):
    with pytest.raises(ConfigError):
        apply_preset(preset, IndexOptions(), MapOptions())


def test_none_preset_resets():
    io, mo = IndexOptions(), MapOptions()
    apply_preset("sr", io, mo)
    apply_preset(None, io, mo)
    assert io == IndexOptions()
    assert mo == MapOptions()


def test_max_intron_len_only_in_splice_mode():
    mo = MapOptions()
    mo.set_max_intron_len(1000)
    assert mo.bw == 500
    mo.flag |= MapFlag.SPLICE
    mo.set_max_intron_len(1000)
    assert mo.bw == mo.bw_long == mo.max_gap_ref == 1000


def test_update_clamps_mid_occ():
    mo = MapOptions()
    mo.update(3)
    assert mo.mid_occ == mo.min_mid_occ
    mo2 = MapOptions()
    mo2.update(10 ** 9)
    assert mo2.mid_occ == mo2.max_mid_occ
    mo3 = MapOptions(mid_occ=77)
    mo3.update(10 ** 9)
    assert mo3.mid_occ == 77


def test_update_sets_splice():
    mo = MapOptions(flag=MapFlag.SPLICE_FOR)
    mo.update(50)
    assert mo.flag & MapFlag.SPLICE
    assert mo.mid_occ == 50


def _code(io, mo):
    with pytest.raises(ConfigError) as info:
        check_options(io, mo)
    return info.value.code


def test_check_errors():
    assert _code(IndexOptions(), MapOptions(bw=30000)) == -8
    assert _code(IndexOptions(), MapOptions(flag=MapFlag.RMQ | MapFlag.SR)) == -7
    assert _code(IndexOptions(), MapOptions(split_prefix="tmp", flag=MapFlag.OUT_CS)) == -6
    assert _code(IndexOptions(k=0), MapOptions()) == -5
    assert _code(IndexOptions(), MapOptions(best_n=-1)) == -4
    assert _code(IndexOptions(), MapOptions(pri_ratio=1.5)) == -4
    assert _code(IndexOptions(), MapOptions(flag=MapFlag.FOR_ONLY | MapFlag.REV_ONLY)) == -3
    assert _code(IndexOptions(), MapOptions(e=0)) == -1
    assert _code(IndexOptions(), MapOptions(e2=5)) == -2
    assert _code(IndexOptions(), MapOptions(q=60, q2=80)) == -1
    assert _code(IndexOptions(), MapOptions(zdrop=100)) == -5
    assert _code(IndexOptions(), MapOptions(flag=MapFlag.NO_PRINT_2ND | MapFlag.ALL_CHAINS)) == -5


def test_best_n_zero_warns():
    warnings = check_options(IndexOptions(), MapOptions(best_n=0))
    assert len(warnings) == 1
    assert "-N 0" in warnings[0]