# simulator.py
import enum

from cache import AccessResult, Cache


class AccessKind(enum.Enum):
    LOAD = "L"
    STORE = "S"
    MODIFY = "M"


class AccessRecord:
    """
    One data access from a trace. `size` and `raw` are carried for
    reporting only; every access is assumed to fit in one block.
    """

    __slots__ = ("kind", "address", "size", "raw")

    def __init__(self, kind, address, size=None, raw=None):
        self.kind = kind
        self.address = address
        self.size = size
        self.raw = raw

    def __str__(self):
        if self.raw is not None:
            return self.raw
        text = f"{self.kind.value} {self.address:x}"
        if self.size is not None:
            text += f",{self.size}"
        return text

    def __repr__(self):
        return f"AccessRecord({self.kind.name}, {self.address:#x}, size={self.size})"

    def __eq__(self, other):
        if not isinstance(other, AccessRecord):
            return NotImplemented
        return (self.kind, self.address, self.size) == (other.kind, other.address, other.size)


class Stats:
    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def record(self, result):
        if result is AccessResult.HIT:
            self.hits += 1
        else:
            self.misses += 1
            if result is AccessResult.MISS_EVICTION:
                self.evictions += 1

    @property
    def accesses(self):
        return self.hits + self.misses

    @property
    def hit_rate(self):
        return self.hits / self.accesses if self.accesses else 0.0

    @property
    def miss_rate(self):
        return self.misses / self.accesses if self.accesses else 0.0

    def as_dict(self):
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "accesses": self.accesses,
            "hit_rate": self.hit_rate,
            "miss_rate": self.miss_rate,
        }

    def summary(self):
        return f"hits:{self.hits} misses:{self.misses} evictions:{self.evictions}"

    def __repr__(self):
        return f"Stats({self.summary()})"


class CacheSimulator:
    """
    Owns one cache and its counters for a single run.
    Records are applied strictly in order.
    """

    def __init__(self, config):
        self.config = config
        self.cache = Cache(config)
        self.stats = Stats()

    def access(self, addr):
        result = self.cache.access(addr)
        self.stats.record(result)
        return result

    def apply(self, record):
        """
        Apply one record and return the outcomes it produced.
        A modify is a load followed by a store to the same address.
        """
        if record.kind is AccessKind.MODIFY:
            return [self.access(record.address), self.access(record.address)]
        if record.kind in (AccessKind.LOAD, AccessKind.STORE):
            return [self.access(record.address)]
        raise ValueError(f"unsupported access kind: {record.kind!r}")

    def replay(self, records, on_record=None):
        for record in records:
            outcomes = self.apply(record)
            if on_record is not None:
                on_record(record, outcomes)
        return self.stats


def simulate(config, records, on_record=None):
    """Replay `records` against a fresh cache built from `config`."""
    return CacheSimulator(config).replay(records, on_record=on_record)
