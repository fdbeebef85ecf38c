import random

from hypothesis import given, settings
from hypothesis import strategies as st

from mmkit.rmq import RmqTree


def _check_node(node):
    """Return (height, size, min_pri) and assert the structural invariants."""
    if node is None:
        return 0, 0, None
    hl, sl, ml = _check_node(node.left)
    hr, sr, mr = _check_node(node.right)
    if node.left is not None:
        assert node.left.key < node.key
    if node.right is not None:
        assert node.right.key > node.key
    assert abs(hr - hl) <= 1
    assert node.balance == hr - hl
    assert node.size == sl + sr + 1
    pris = [node.pri] + [m for m in (ml, mr) if m is not None]
    assert node.s.pri == min(pris)
    return max(hl, hr) + 1, node.size, min(pris)


def _build(pairs):
    tree = RmqTree()
    for key, pri in pairs:
        tree.insert(key, pri)
    return tree


def _key_or_none(node):
    return None if node is None else node.key


def test_empty_tree():
    tree = RmqTree()
    assert len(tree) == 0
    assert list(tree) == []
    assert tree.find(1) is None
    assert tree.rmq(0, 10) is None
    assert tree.erase(1) is None
    assert tree.erase_first() is None


def test_insert_iterates_in_order():
    keys = [5, 3, 8, 1, 4, 7, 9, 2, 6]
    tree = _build((k, k) for k in keys)
    assert [n.key for n in tree] == sorted(keys)
    assert len(tree) == len(keys)
    _check_node(tree.root)


def test_duplicate_insert_returns_existing():
    tree = RmqTree()
    first = tree.insert(4, 10)
    again = tree.insert(4, 1)
    assert again is first
    assert again.pri == 10
    assert len(tree) == 1


def test_find_and_erase():
    tree = _build((k, -k) for k in range(20))
    node = tree.find(7)
    assert node.key == 7 and node.pri == -7
    removed = tree.erase(7)
    assert removed.key == 7
    assert tree.find(7) is None
    assert tree.erase(7) is None
    assert len(tree) == 19
    _check_node(tree.root)


def test_erase_first_pops_in_order():
    keys = list(range(30))
    random.Random(2).shuffle(keys)
    tree = _build((k, k) for k in keys)
    popped = []
    while len(tree):
        popped.append(tree.erase_first().key)
        _check_node(tree.root)
    assert popped == list(range(30))


def test_interval():
    tree = _build([(10, 0), (20, 0), (30, 0)])

    def keys(pair):
        return tuple(_key_or_none(n) for n in pair)

    assert keys(tree.interval(25)) == (20, 30)
    assert keys(tree.interval(20)) == (20, 20)
    assert keys(tree.interval(5)) == (None, 10)
    assert keys(tree.interval(35)) == (30, None)


def test_rmq_simple():
    tree = _build([(1, 5.0), (2, 3.0), (3, 9.0), (4, 1.0), (5, 7.0)])
    assert tree.rmq(1, 3).key == 2
    assert tree.rmq(1, 5).key == 4
    assert tree.rmq(5, 5).key == 5
    assert tree.rmq(6, 10) is None
    assert tree.rmq(3, 2) is None


def test_walk_from():
    tree = _build((k, k) for k in (1, 3, 5, 7, 9))
    assert [n.key for n in tree.walk_from(4)] == [5, 7, 9]
    assert [n.key for n in tree.walk_from(4, reverse=True)] == [3, 1]
    assert [n.key for n in tree.walk_from(5, reverse=True)] == [5, 3, 1]
    assert [n.key for n in tree.walk_from(5)] == [5, 7, 9]
    assert list(tree.walk_from(10)) == []
    assert list(tree.walk_from(0, reverse=True)) == []
    assert [n.key for n in tree.walk_from(0)] == [1, 3, 5, 7, 9]


def test_tuple_keys():
    tree = _build([((3, 1), 2), ((3, 0), 5), ((1, 9), 1), ((7, 2), 0)])
    assert [n.key for n in tree] == [(1, 9), (3, 0), (3, 1), (7, 2)]
    assert tree.rmq((2, 0), (3, 10)).key == (3, 1)


_ops = st.lists(
    st.tuples(
        st.sampled_from(["ins", "ins", "del", "first"]),
        st.integers(min_value=0, max_value=60),
        st.integers(min_value=-50, max_value=50),
    ),
    max_size=120,
)


@settings(max_examples=150, deadline=None)
@given(_ops, st.lists(st.tuples(st.integers(-5, 65), st.integers(-5, 65)), max_size=10))
def test_matches_a_dictionary_model(ops, queries):
    tree = RmqTree()
    model = {}
    for op, key, pri in ops:
        if op == "ins":
            tree.insert(key, pri)
            model.setdefault(key, pri)
        elif op == "del":
            expected = key if key in model else None
            removed = tree.erase(key)
            assert _key_or_none(removed) == expected
            model.pop(key, None)
        elif op == "first":
            expected = min(model) if model else None
            removed = tree.erase_first()
            assert _key_or_none(removed) == expected
            model.pop(expected, None)
        _check_node(tree.root)
    assert len(tree) == len(model)
    assert [(n.key, n.pri) for n in tree] == sorted(model.items())
    for lo, hi in queries:
        inside = [p for k, p in model.items() if lo <= k <= hi]
        expected_pri = min(inside) if inside else None
        got = tree.rmq(lo, hi)
        got_pri = None if got is None else got.pri
        assert got_pri == expected_pri
        got_key_in_range = got is None or lo <= got.key <= hi
        assert got_key_in_range