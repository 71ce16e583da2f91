# benchmark.py
import os
import json
import time
import numpy as np

from config import CacheConfig, ConfigError, require_int
from simulator import AccessKind, AccessRecord, simulate
from tracefile import read_trace

PATTERNS = ("sequential", "random", "mixed")


def require_number(name, value, low=0.0, high=None):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if value < low or (high is not None and value > high):
        bound = f"between {low} and {high}" if high is not None else f">= {low}"
        raise ConfigError(f"{name} must be {bound}, got {value}")
    return value


def section(cfg, name, default):
    value = cfg.get(name, default)
    if not isinstance(value, type(default)):
        raise ConfigError(f"'{name}' must be a JSON {'list' if isinstance(default, list) else 'object'}")
    return value


class MemoryModel:
    def __init__(self, hit_ns=10, miss_ns=100):
        self.hit_ns = hit_ns
        self.miss_ns = miss_ns

    def average_latency(self, stats):
        """
        Average memory access time in ns for a finished run:
        every access pays the hit time, misses add the miss penalty.
        """
        if not stats.accesses:
            return 0.0
        return self.hit_ns + stats.miss_rate * self.miss_ns


class WorkloadGenerator:
    """
    Synthetic data-access stream over a working set of `num_blocks`
    blocks of `block_size` bytes. Same seed, same stream.
    """

    def __init__(self, num_blocks, block_size=64, pattern="mixed",
                 read_ratio=0.8, modify_ratio=0.0, seed=None):
        if pattern not in PATTERNS:
            raise ConfigError(f"access_pattern must be one of {', '.join(PATTERNS)}, got {pattern!r}")
        read_ratio = require_number("read_ratio", read_ratio, 0.0, 1.0)
        modify_ratio = require_number("modify_ratio", modify_ratio, 0.0, 1.0)
        if seed is not None:
            seed = require_int("random_seed", seed, 0)
        self.num_blocks = require_int("num_blocks", num_blocks, 1)
        self.block_size = require_int("block_size_bytes", block_size, 1)
        self.pattern = pattern
        self.read_ratio = read_ratio
        self.modify_ratio = modify_ratio
        self.rng = np.random.default_rng(seed)
        self._seq_ptr = 0

    def _next_sequential(self):
        block = self._seq_ptr
        self._seq_ptr = (block + 1) % self.num_blocks
        return block

    def _next_block(self):
        if self.pattern == "sequential":
            return self._next_sequential()
        elif self.pattern == "random":
            return int(self.rng.integers(0, self.num_blocks))
        else:  # mixed: mostly sequential with some random
            if self.rng.random() < 0.8:
                return self._next_sequential()
            return int(self.rng.integers(0, self.num_blocks))

    def _next_kind(self):
        u = self.rng.random()
        if u < self.modify_ratio:
            return AccessKind.MODIFY
        # remaining probability mass is split by read_ratio
        if u < self.modify_ratio + (1.0 - self.modify_ratio) * self.read_ratio:
            return AccessKind.LOAD
        return AccessKind.STORE

    def generate(self, count):
        records = []
        for _ in range(count):
            block = self._next_block()
            offset = int(self.rng.integers(0, self.block_size))
            kind = self._next_kind()
            records.append(AccessRecord(kind, block * self.block_size + offset, size=1))
        return records


class BenchmarkRunner:
    def __init__(self, cfg):
        if not isinstance(cfg, dict):
            raise ConfigError("benchmark config must be a JSON object")
        self.cfg = cfg
        self.config = CacheConfig.from_dict(section(cfg, "cache", {}))
        mem_cfg = section(cfg, "memory", {})
        self.mem = MemoryModel(
            hit_ns=require_number("hit_latency_ns", mem_cfg.get("hit_latency_ns", 10)),
            miss_ns=require_number("miss_latency_ns", mem_cfg.get("miss_latency_ns", 100)),
        )
        self.sweep = [CacheConfig.from_dict(c) for c in section(cfg, "sweep", [])]
        bench_cfg = section(cfg, "benchmark", {})
        self.trace = bench_cfg.get("trace")
        if self.trace is not None and not isinstance(self.trace, str):
            raise ConfigError(f"trace must be a path, got {self.trace!r}")
        self.strict = bool(bench_cfg.get("strict", False))
        self.num_requests = require_int("num_requests", bench_cfg.get("num_requests", 10000), 0)
        block_size = require_int("block_size_bytes", bench_cfg.get("block_size_bytes", 64), 1)
        working_set = require_int("working_set_kb", bench_cfg.get("working_set_kb", 64), 1) * 1024
        if working_set < block_size:
            raise ConfigError(
                f"working_set_kb ({working_set // 1024}) must hold at least one {block_size} byte block"
            )
        self.generator = WorkloadGenerator(
            num_blocks=working_set // block_size,
            block_size=block_size,
            pattern=bench_cfg.get("access_pattern", "mixed"),
            read_ratio=bench_cfg.get("read_ratio", 0.8),
            modify_ratio=bench_cfg.get("modify_ratio", 0.0),
            seed=bench_cfg.get("random_seed", None),
        )
        self.output = section(cfg, "output", {})
        self.skipped = 0

    def load_records(self):
        if self.trace:
            records, self.skipped = read_trace(self.trace, strict=self.strict)
            return records
        return self.generator.generate(self.num_requests)

    def measure(self, config, records):
        start = time.perf_counter()
        stats = simulate(config, records)
        end = time.perf_counter()
        summary = config.as_dict()
        summary.update(stats.as_dict())
        summary["total_records"] = len(records)
        summary["avg_latency_ns"] = self.mem.average_latency(stats)
        summary["duration_s"] = end - start
        return summary, stats

    def run(self):
        """
        Replay the workload against the main cache and every swept
        geometry. Every geometry sees the identical record stream.
        """
        records = self.load_records()
        summary, stats = self.measure(self.config, records)
        summary["skipped_lines"] = self.skipped
        sweep_results = [self.measure(c, records)[0] for c in self.sweep]
        return summary, stats, sweep_results

    def save_results(self, summary, sweep_results, out_cfg):
        results_dir = out_cfg.get("results_dir", "results")
        os.makedirs(results_dir, exist_ok=True)
        path = os.path.join(results_dir, out_cfg.get("results_file", "results.json"))
        with open(path, "w") as f:
            json.dump({"summary": summary, "sweep": sweep_results}, f, indent=2)
        return path
