"""AVL tree with subtree counts and range-minimum queries over node priorities."""

from __future__ import annotations

from typing import Any, Iterator, Optional


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class RmqNode:
    """A tree node holding a key and a priority; smaller priorities win queries."""

    __slots__ = ("key", "pri", "p", "s", "balance", "size")

    def __init__(self, key: Any, pri: Any):
        self.key = key
        self.pri = pri
        self.p: list[Optional[RmqNode]] = [None, None]
        self.s: RmqNode = self
        self.balance = 0
        self.size = 1

    @property
    def left(self) -> Optional["RmqNode"]:
        return self.p[0]

    @property
    def right(self) -> Optional["RmqNode"]:
        return self.p[1]

    def __repr__(self) -> str:
        return f"RmqNode(key={self.key!r}, pri={self.pri!r})"


def _size(n: Optional[RmqNode]) -> int:
    return n.size if n is not None else 0


def _update_min(p: RmqNode, q: Optional[RmqNode], r: Optional[RmqNode]) -> None:
    p.s = p if q is None or p.pri < q.s.pri else q.s
    p.s = p.s if r is None or p.s.pri < r.s.pri else r.s


def _rotate1(p: RmqNode, d: int) -> RmqNode:
    opp = 1 - d
    q = p.p[opp]
    s = p.s
    size_p = p.size
    p.size -= q.size - _size(q.p[d])
    q.size = size_p
    _update_min(p, p.p[d], q.p[d])
    q.s = s
    p.p[opp] = q.p[d]
    q.p[d] = p
    return q


def _rotate2(p: RmqNode, d: int) -> RmqNode:
    opp = 1 - d
    q = p.p[opp]
    r = q.p[d]
    s = p.s
    size_x_dir = _size(r.p[d])
    r.size = p.size
    p.size -= q.size - size_x_dir
    q.size -= size_x_dir + 1
    _update_min(p, p.p[d], r.p[d])
    _update_min(q, q.p[opp], r.p[opp])
    r.s = s
    p.p[opp] = r.p[d]
    r.p[d] = p
    q.p[d] = r.p[opp]
    r.p[opp] = q
    b1 = 1 if d == 0 else -1
    if r.balance == b1:
        q.balance, p.balance = 0, -b1
    elif r.balance == 0:
        q.balance = p.balance = 0
    else:
        q.balance, p.balance = b1, 0
    r.balance = 0
    return r


def _advance(stack: list[RmqNode], d: int) -> bool:
    if not stack:
        return False
    p = stack[-1].p[d]
    if p is not None:
        while p is not None:
            stack.append(p)
            p = p.p[1 - d]
        return True
    while True:
        p = stack.pop()
        if not (stack and p is stack[-1].p[d]):
            break
    return bool(stack)


class RmqTree:
    """Balanced search tree keyed by comparable keys, answering range-minimum queries."""

    def __init__(self) -> None:
        self.root: Optional[RmqNode] = None

    def __len__(self) -> int:
        return _size(self.root)

    def __iter__(self) -> Iterator[RmqNode]:
        stack: list[RmqNode] = []
        p = self.root
        while p is not None:
            stack.append(p)
            p = p.p[0]
        while stack:
            yield stack[-1]
            if not _advance(stack, 1):
                break

    def insert(self, key: Any, pri: Any) -> RmqNode:
        """Insert ``key`` with priority ``pri``; return the new node or the existing one."""
        bp, bq = self.root, None
        p, q = self.root, None
        stack: list[int] = []
        path: list[RmqNode] = []
        which = 0
        while p is not None:
            c = _cmp(key, p.key)
            if c == 0:
                return p
            if p.balance != 0:
                bq, bp = q, p
                stack.clear()
            which = 1 if c > 0 else 0
            stack.append(which)
            path.append(p)
            q, p = p, p.p[which]
        x = RmqNode(key, pri)
        if q is None:
            self.root = x
        else:
            q.p[which] = x
        if bp is None:
            return x
        for n in path:
            n.size += 1
        for n in reversed(path):
            _update_min(n, n.p[0], n.p[1])
            if n.s is not x:
                break
        p = bp
        for step in stack:
            if p is x:
                break
            p.balance += 1 if step else -1
            p = p.p[step]
        if -2 < bp.balance < 2:
            return x
        which = 1 if bp.balance < 0 else 0
        b1 = 1 if which == 0 else -1
        q = bp.p[1 - which]
        if q.balance == b1:
            r = _rotate1(bp, which)
            q.balance = bp.balance = 0
        else:
            r = _rotate2(bp, which)
        if bq is None:
            self.root = r
        else:
            bq.p[0 if bp is bq.p[0] else 1] = r
        return x

    def find(self, key: Any) -> Optional[RmqNode]:
        """Return the node with ``key``, or ``None``."""
        p = self.root
        while p is not None:
            c = _cmp(key, p.key)
            if c == 0:
                return p
            p = p.p[0] if c < 0 else p.p[1]
        return None

    def interval(self, key: Any) -> tuple[Optional[RmqNode], Optional[RmqNode]]:
        """Return the nearest nodes at or below and at or above ``key``."""
        p = self.root
        lower = upper = None
        while p is not None:
            c = _cmp(key, p.key)
            if c < 0:
                upper, p = p, p.p[0]
            elif c > 0:
                lower, p = p, p.p[1]
            else:
                lower = upper = p
                break
        return lower, upper

    def rmq(self, lo: Any, hi: Any) -> Optional[RmqNode]:
        """Return the node of smallest priority with key in the closed range [lo, hi]."""
        if self.root is None:
            return None
        paths: list[list[RmqNode]] = [[], []]
        cmps: list[list[int]] = [[], []]
        for side, bound in ((0, lo), (1, hi)):
            p = self.root
            while p is not None:
                c = _cmp(bound, p.key)
                paths[side].append(p)
                cmps[side].append(c)
                if c < 0:
                    p = p.p[0]
                elif c > 0:
                    p = p.p[1]
                else:
                    break
        for lca in range(min(len(paths[0]), len(paths[1]))):
            if paths[0][lca] is paths[1][lca] and cmps[0][lca] <= 0 and cmps[1][lca] >= 0:
                break
        else:
            return None
        best = paths[0][lca]
        for node, c in zip(paths[0][lca + 1:], cmps[0][lca + 1:]):
            if c <= 0:
                if node.pri < best.pri:
                    best = node
                right = node.p[1]
                if right is not None and right.s.pri < best.pri:
                    best = right.s
        for node, c in zip(paths[1][lca + 1:], cmps[1][lca + 1:]):
            if c >= 0:
                if node.pri < best.pri:
                    best = node
                left = node.p[0]
                if left is not None and left.s.pri < best.pri:
                    best = left.s
        return best

    def _erase(self, key: Any, first: bool) -> Optional[RmqNode]:
        if self.root is None:
            return None
        fake = RmqNode(None, None)
        fake.p = [self.root, None]
        path: list[RmqNode] = []
        dirs: list[int] = []
        if not first:
            c = -1
            p = fake
            while c:
                which = 1 if c > 0 else 0
                dirs.append(which)
                path.append(p)
                p = p.p[which]
                if p is None:
                    return None
                c = _cmp(key, p.key)
        else:
            p = fake
            while p is not None:
                dirs.append(0)
                path.append(p)
                p = p.p[0]
            p = path.pop()
            dirs.pop()
        for node in path[1:]:
            node.size -= 1
        if p.p[1] is None:
            path[-1].p[dirs[-1]] = p.p[0]
        else:
            q = p.p[1]
            if q.p[0] is None:
                q.p[0] = p.p[0]
                q.balance = p.balance
                path[-1].p[dirs[-1]] = q
                path.append(q)
                dirs.append(1)
                q.size = p.size - 1
            else:
                e = len(path)
                path.append(p)  # placeholder, replaced by the successor below
                dirs.append(1)
                while True:
                    dirs.append(0)
                    path.append(q)
                    r = q.p[0]
                    if r.p[0] is None:
                        break
                    q = r
                r.p[0] = p.p[0]
                q.p[0] = r.p[1]
                r.p[1] = p.p[1]
                r.balance = p.balance
                path[e - 1].p[dirs[e - 1]] = r
                path[e], dirs[e] = r, 1
                for node in path[e + 1:]:
                    node.size -= 1
                r.size = p.size - 1
        for node in reversed(path[1:]):
            _update_min(node, node.p[0], node.p[1])
        for d in range(len(path) - 1, 0, -1):
            q = path[d]
            which = dirs[d]
            other = 1 - which
            b1, b2 = (-1, -2) if which else (1, 2)
            q.balance += b1
            if q.balance == b1:
                break
            if q.balance == b2:
                r = q.p[other]
                if r.balance == -b1:
                    path[d - 1].p[dirs[d - 1]] = _rotate2(q, which)
                else:
                    path[d - 1].p[dirs[d - 1]] = _rotate1(q, which)
                    if r.balance == 0:
                        r.balance, q.balance = -b1, b1
                        break
                    r.balance = q.balance = 0
        self.root = fake.p[0]
        p.p = [None, None]
        p.s, p.size, p.balance = p, 1, 0
        return p

    def erase(self, key: Any) -> Optional[RmqNode]:
        """Remove and return the node with ``key``, or return ``None`` if absent."""
        return self._erase(key, False)

    def erase_first(self) -> Optional[RmqNode]:
        """Remove and return the node with the smallest key, or ``None`` if empty."""
        return self._erase(None, True)

    def walk_from(self, key: Any, reverse: bool = False) -> Iterator[RmqNode]:
        """Yield nodes in key order from ``key``.

        Forward, the walk starts at the smallest key not below ``key``; with
        ``reverse`` it starts at the largest key not above ``key`` and goes down.
        """
        stack: list[RmqNode] = []
        p = self.root
        found = False
        while p is not None:
            stack.append(p)
            c = _cmp(key, p.key)
            if c < 0:
                p = p.p[0]
            elif c > 0:
                p = p.p[1]
            else:
                found = True
                break
        d = 0 if reverse else 1
        if not found and stack:
            top = stack[-1].key
            if (not reverse and top < key) or (reverse and top > key):
                if not _advance(stack, d):
                    return
        while stack:
            yield stack[-1]
            if not _advance(stack, d):
                break