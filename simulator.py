# simulator.py
import json
import os

from cache import AccessResult, Cache, ConfigurationError
from tracefile import Operation, format_event, read_trace
from workload import WorkloadGenerator

class Counters:
    def __init__(self, hits=0, misses=0, evictions=0):
        self.hits = hits
        self.misses = misses
        self.evictions = evictions

    @property
    def accesses(self):
        return self.hits + self.misses

    @property
    def hit_rate(self):
        return self.hits / self.accesses if self.accesses else 0.0

    def record(self, result):
        if result is AccessResult.HIT:
            self.hits += 1
        else:
            self.misses += 1
            if result is AccessResult.MISS_EVICTION:
                self.evictions += 1

    def as_dict(self):
        return {"hits": self.hits, "misses": self.misses, "evictions": self.evictions}

    def __eq__(self, other):
        if not isinstance(other, Counters):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return f"Counters(hits={self.hits}, misses={self.misses}, evictions={self.evictions})"

class AccessDriver:
    """
    Feeds access events into a cache and tallies hits/misses/evictions.
    A Modify is a load followed by a store to the same block, so it makes
    two cache accesses and the second one always hits.
    """

    def __init__(self, cache, verbose=False):
        self.cache = cache
        self.verbose = verbose
        self.counters = Counters()

    def process(self, event):
        set_index, tag = self.cache.decode(event.address)
        results = [self.cache.access(set_index, tag)]
        if event.op is Operation.MODIFY:
            results.append(self.cache.access(set_index, tag))

        for result in results:
            self.counters.record(result)
        if self.verbose:
            print(format_event(event), " ".join(r.value for r in results))
        return results

    def run(self, events):
        for event in events:
            self.process(event)
        return self.counters

def simulate(events, set_bits, associativity, block_bits, verbose=False):
    """Run `events` against a fresh cache and return the final Counters."""
    with Cache(set_bits, associativity, block_bits) as cache:
        return AccessDriver(cache, verbose=verbose).run(events)

def config_section(cfg, name):
    section = cfg.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"config section {name!r} must be an object, got {section!r}")
    return section

class SimulationRunner:
    def __init__(self, cfg):
        self.cfg = cfg
        cache_cfg = config_section(cfg, "cache")
        self.set_bits = cache_cfg.get("set_bits", 0)
        self.associativity = cache_cfg.get("lines_per_set", 1)
        self.block_bits = cache_cfg.get("block_bits", 0)
        trace_cfg = config_section(cfg, "trace")
        self.trace_path = trace_cfg.get("path")
        self.verbose = trace_cfg.get("verbose", False)
        self.workload_cfg = config_section(cfg, "workload")

    def events(self):
        """Fresh event stream: the trace file if one is configured, else a synthetic workload."""
        if self.trace_path:
            return read_trace(self.trace_path)
        return iter(WorkloadGenerator(self.workload_cfg))

    def source_name(self):
        if self.trace_path:
            return self.trace_path
        return f"synthetic:{self.workload_cfg.get('access_pattern', 'mixed')}"

    def _summary(self, associativity, counters):
        summary = {
            "source": self.source_name(),
            "set_bits": self.set_bits,
            "lines_per_set": associativity,
            "block_bits": self.block_bits,
            "hit_rate": counters.hit_rate,
        }
        summary.update(counters.as_dict())
        return summary

    def run(self):
        with Cache(self.set_bits, self.associativity, self.block_bits) as cache:
            counters = AccessDriver(cache, verbose=self.verbose).run(self.events())
            summary = self._summary(self.associativity, counters)
            summary["cache"] = cache.stats()
        return summary, counters

    def sweep(self, ways=None):
        """
        Replay the same event source once per associativity in `ways`.
        Returns a list of summaries, one per associativity.
        """
        if ways is None:
            ways = config_section(self.cfg, "sweep").get("lines_per_set", [1, 2, 4, 8])
        if not isinstance(ways, (list, tuple)):
            raise ConfigurationError(f"sweep lines_per_set must be a list, got {ways!r}")
        # materialise once so a seeded workload is identical for every run
        events = list(self.events())
        results = []
        for associativity in ways:
            counters = simulate(events, self.set_bits, associativity, self.block_bits)
            results.append(self._summary(associativity, counters))
        return results

    def save_results(self, summary, out_cfg):
        results_dir = out_cfg.get("results_dir", "results")
        os.makedirs(results_dir, exist_ok=True)
        path = os.path.join(results_dir, out_cfg.get("results_file", "results.json"))
        with open(path, "w") as f:
            json.dump(summary, f, indent=2)
        return path
