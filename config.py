# config.py
import json

ADDRESS_BITS = 64


class ConfigError(ValueError):
    """Raised for an unusable cache geometry or config file."""


def load_config(path="config.json"):
    try:
        with open(path, "r") as f:
            return json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in {path}: {e}") from e


def require_int(name, value, minimum):
    if value is None:
        raise ConfigError(f"missing required parameter: {name}")
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, str):
        try:
            value = int(value, 10)
        except ValueError:
            raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


class CacheConfig:
    """
    Immutable cache geometry.
    s = set index bits, b = block offset bits, E = lines per set.
    """

    __slots__ = ("s", "b", "E")

    def __init__(self, s, b, E):
        s = require_int("s", s, 0)
        b = require_int("b", b, 0)
        E = require_int("E", E, 1)
        if s + b >= ADDRESS_BITS:
            raise ConfigError(
                f"s + b must be less than {ADDRESS_BITS}, got {s} + {b} = {s + b}"
            )
        object.__setattr__(self, "s", s)
        object.__setattr__(self, "b", b)
        object.__setattr__(self, "E", E)

    def __setattr__(self, name, value):
        raise AttributeError("CacheConfig is immutable")

    @classmethod
    def from_dict(cls, d):
        if not isinstance(d, dict):
            raise ConfigError(f"cache config must be an object, got {type(d).__name__}")
        s = d.get("s", d.get("set_bits"))
        b = d.get("b", d.get("block_bits"))
        E = d.get("E", d.get("associativity"))
        return cls(s, b, E)

    @property
    def num_sets(self):
        return 1 << self.s

    @property
    def block_size(self):
        return 1 << self.b

    @property
    def size_bytes(self):
        return self.num_sets * self.E * self.block_size

    def label(self):
        return f"s={self.s} E={self.E} b={self.b}"

    def as_dict(self):
        return {
            "s": self.s,
            "E": self.E,
            "b": self.b,
            "num_sets": self.num_sets,
            "block_size": self.block_size,
            "size_bytes": self.size_bytes,
        }

    def __eq__(self, other):
        if not isinstance(other, CacheConfig):
            return NotImplemented
        return (self.s, self.b, self.E) == (other.s, other.b, other.E)

    def __hash__(self):
        return hash((self.s, self.b, self.E))

    def __repr__(self):
        return f"CacheConfig(s={self.s}, b={self.b}, E={self.E})"
