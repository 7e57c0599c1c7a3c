# workload.py
import numpy as np

from cache import ConfigurationError
from tracefile import AccessEvent, Operation

PATTERNS = ("sequential", "random", "mixed")

class WorkloadGenerator:
    """
    Synthetic access stream over a fixed address space.
    sequential: walks the space one access_size step at a time, wrapping
    random: uniform over the space
    mixed: 80% sequential, 20% random
    """

    def __init__(self, cfg):
        try:
            self.num_requests = int(cfg.get("num_requests", 10000))
            self.address_space = int(cfg.get("address_space_kb", 1024)) * 1024
            self.read_ratio = float(cfg.get("read_ratio", 0.7))
            self.modify_ratio = float(cfg.get("modify_ratio", 0.1))
            self.access_size = int(cfg.get("access_size", 8))
            self.base_address = int(cfg.get("base_address", 0))
            self.rng = np.random.default_rng(cfg.get("random_seed", None))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"bad workload setting: {exc}") from exc
        self.access_pattern = cfg.get("access_pattern", "mixed")
        self._seq_ptr = 0

        if self.access_pattern not in PATTERNS:
            raise ConfigurationError(f"unknown access pattern {self.access_pattern!r}")
        if self.num_requests < 0:
            raise ConfigurationError("num_requests must be >= 0")
        if self.address_space <= 0 or self.access_size <= 0:
            raise ConfigurationError("address_space_kb and access_size must be positive")
        for name, ratio in (("read_ratio", self.read_ratio), ("modify_ratio", self.modify_ratio)):
            if not 0.0 <= ratio <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {ratio}")
        if self.read_ratio + self.modify_ratio > 1.0:
            raise ConfigurationError("read_ratio + modify_ratio must not exceed 1")

    def _next_sequential(self):
        addr = self._seq_ptr
        self._seq_ptr = (addr + self.access_size) % self.address_space
        return addr

    def _next_random(self):
        return int(self.rng.integers(0, self.address_space))

    def _next_offset(self):
        if self.access_pattern == "sequential":
            return self._next_sequential()
        elif self.access_pattern == "random":
            return self._next_random()
        else:
            if self.rng.random() < 0.8:
                return self._next_sequential()
            return self._next_random()

    def _next_op(self):
        r = self.rng.random()
        if r < self.read_ratio:
            return Operation.LOAD
        if r < self.read_ratio + self.modify_ratio:
            return Operation.MODIFY
        return Operation.STORE

    def __iter__(self):
        for _ in range(self.num_requests):
            op = self._next_op()
            yield AccessEvent(op, self.base_address + self._next_offset(), self.access_size)
