# cache.py
import enum

ADDRESS_MASK = (1 << 64) - 1

class ConfigurationError(ValueError):
    pass

class AccessResult(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    MISS_EVICTION = "miss eviction"

def decode_address(address, set_bits, block_bits):
    """
    Split a 64-bit address into (tag, set_index, offset).
    Offset is the low `block_bits` bits, set index the next `set_bits` bits,
    tag everything above.
    """
    address &= ADDRESS_MASK
    offset = address & ((1 << block_bits) - 1)
    set_index = (address >> block_bits) & ((1 << set_bits) - 1)
    tag = address >> (set_bits + block_bits)
    return tag, set_index, offset

class Line:
    __slots__ = ("tag", "valid", "recency")

    def __init__(self):
        self.tag = 0
        self.valid = False
        self.recency = 0

    def __repr__(self):
        return f"Line(tag={self.tag:#x}, valid={self.valid}, recency={self.recency})"

class CacheSet:
    """
    E lines plus the set's clock. The clock only ever grows, so two valid
    lines never share a recency value and the LRU victim is unique.
    """

    def __init__(self, associativity):
        self.lines = [Line() for _ in range(associativity)]
        self.clock = 0

    def _tick(self):
        self.clock += 1
        return self.clock

    def find(self, tag):
        for i, line in enumerate(self.lines):
            if line.valid and line.tag == tag:
                return i
        return None

    def find_empty(self):
        for i, line in enumerate(self.lines):
            if not line.valid:
                return i
        return None

    def find_victim(self):
        # min() keeps the first of equal keys, i.e. the lowest line index
        return min(range(len(self.lines)), key=lambda i: self.lines[i].recency)

    def access(self, tag):
        i = self.find(tag)
        if i is not None:
            self.lines[i].recency = self._tick()
            return AccessResult.HIT

        i = self.find_empty()
        if i is not None:
            result = AccessResult.MISS
        else:
            i = self.find_victim()
            result = AccessResult.MISS_EVICTION

        line = self.lines[i]
        line.valid = True
        line.tag = tag
        line.recency = self._tick()
        return result

    def valid_tags(self):
        return [line.tag for line in self.lines if line.valid]

class Cache:
    """
    Set-associative cache with LRU replacement.
    S = 2**set_bits sets, `associativity` lines per set, blocks of
    2**block_bits bytes. Use as a context manager, or call close() when done.
    """

    def __init__(self, set_bits=0, associativity=1, block_bits=0):
        for name, value in (("set_bits", set_bits), ("associativity", associativity),
                            ("block_bits", block_bits)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if set_bits < 0:
            raise ConfigurationError(f"set_bits must be >= 0, got {set_bits}")
        if block_bits < 0:
            raise ConfigurationError(f"block_bits must be >= 0, got {block_bits}")
        if associativity < 1:
            raise ConfigurationError(f"associativity must be >= 1, got {associativity}")

        self.set_bits = set_bits
        self.block_bits = block_bits
        self.associativity = associativity
        self.num_sets = 1 << set_bits
        self.block_size = 1 << block_bits
        self.sets = [CacheSet(associativity) for _ in range(self.num_sets)]

    @property
    def closed(self):
        return self.sets is None

    def _check_open(self):
        if self.sets is None:
            raise ValueError("operation on closed cache")

    def decode(self, address):
        """Return (set_index, tag) for `address`."""
        tag, set_index, _ = decode_address(address, self.set_bits, self.block_bits)
        return set_index, tag

    def access(self, set_index, tag):
        """
        Look up `tag` in set `set_index`, filling or evicting (LRU) on a miss.
        Returns an AccessResult.
        """
        self._check_open()
        if not 0 <= set_index < self.num_sets:
            raise IndexError(f"set index {set_index} out of range [0, {self.num_sets})")
        return self.sets[set_index].access(tag)

    def close(self):
        self.sets = None

    def __enter__(self):
        self._check_open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def stats(self):
        self._check_open()
        used_lines = sum(len(s.valid_tags()) for s in self.sets)
        return {
            "set_bits": self.set_bits,
            "block_bits": self.block_bits,
            "num_sets": self.num_sets,
            "associativity": self.associativity,
            "block_size": self.block_size,
            "capacity_bytes": self.num_sets * self.associativity * self.block_size,
            "used_lines": used_lines,
        }
