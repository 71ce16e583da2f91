# cache.py
import collections
import enum

from config import CacheConfig


class AccessResult(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    MISS_EVICTION = "miss eviction"


def decode_address(addr, s, b):
    """
    Split `addr` into (set_index, tag) for a cache with 2**s sets
    and 2**b byte blocks. Offset bits are dropped.
    """
    set_index = (addr >> b) & ((1 << s) - 1)
    tag = addr >> (s + b)
    return set_index, tag


class CacheLine:
    __slots__ = ("valid", "tag")

    def __init__(self):
        self.valid = False
        self.tag = 0

    def __repr__(self):
        return f"CacheLine(valid={self.valid}, tag={self.tag:#x})"


class CacheSet:
    """
    Group of up to `associativity` lines with strict LRU replacement.
    Lines are allocated as they fill; no line is ever invalidated, so
    appending always takes the lowest free index.
    Valid lines are kept in an OrderedDict keyed by tag.
    Leftmost = least recently used, rightmost = most recent.
    """

    def __init__(self, associativity):
        self.associativity = associativity
        self.lines = []
        self._recency = collections.OrderedDict()

    def __len__(self):
        return len(self._recency)

    def is_full(self):
        return len(self._recency) == self.associativity

    def lookup(self, tag):
        return self._recency.get(tag)

    def recency(self):
        """Tags of the valid lines, least recently used first."""
        return list(self._recency)

    def touch(self, tag):
        self._recency.move_to_end(tag)

    def install(self, tag):
        """
        Place `tag`, which must not already be resident, into the set as
        the most recent line. Returns True if a valid line had to be
        evicted to make room.
        """
        if tag in self._recency:
            raise ValueError(f"tag {tag:#x} is already in the set")
        if self.is_full():
            _, line = self._recency.popitem(last=False)
            evicted = True
        else:
            line = CacheLine()
            line.valid = True
            self.lines.append(line)
            evicted = False
        line.tag = tag
        self._recency[tag] = line
        return evicted


class Cache:
    """
    Set-associative LRU cache with 2**s sets of E lines, 2**b byte blocks.
    Geometry is fixed at construction. Sets are only materialized on
    first touch, so `sets` maps set index -> CacheSet for touched sets.
    """

    def __init__(self, config: CacheConfig):
        self.config = config
        self.sets = {}

    def decode(self, addr):
        return decode_address(addr, self.config.s, self.config.b)

    def _set(self, si):
        s = self.sets.get(si)
        if s is None:
            s = self.sets[si] = CacheSet(self.config.E)
        return s

    def access(self, addr):
        """
        Access byte address `addr`. Updates LRU state and
        returns the AccessResult for this one access.
        """
        si, tag = self.decode(addr)
        s = self._set(si)
        if s.lookup(tag) is not None:
            s.touch(tag)
            return AccessResult.HIT
        if s.install(tag):
            return AccessResult.MISS_EVICTION
        return AccessResult.MISS

    def contains(self, addr):
        si, tag = self.decode(addr)
        s = self.sets.get(si)
        return s is not None and s.lookup(tag) is not None

    def stats(self):
        used_lines = sum(len(s) for s in self.sets.values())
        info = self.config.as_dict()
        info["used_lines"] = used_lines
        info["touched_sets"] = len(self.sets)
        return info
