import pytest

from cache import AccessResult, Cache, ConfigurationError, decode_address

HIT, MISS, EVICT = AccessResult.HIT, AccessResult.MISS, AccessResult.MISS_EVICTION


def test_decode_address_fields():
    # tag=0b1111, set=0b101, offset=0b101010 with s=3, b=6
    tag, set_index, offset = decode_address(0b1111_101_101010, 3, 6)
    assert (tag, set_index, offset) == (0b1111, 5, 42)


def test_decode_zero_widths():
    assert decode_address(0x1234, 0, 0) == (0x1234, 0, 0)
    assert decode_address(0x1234, 0, 4) == (0x123, 0, 4)


def test_decode_masks_to_64_bits():
    assert decode_address((1 << 64) + 0x210, 4, 4) == (2, 1, 0)
    assert decode_address((1 << 64) - 1, 4, 4)[0] == (1 << 56) - 1


def test_cache_decode_returns_set_then_tag():
    cache = Cache(4, 1, 4)
    assert cache.decode(0x210) == (1, 2)


@pytest.mark.parametrize("s,E,b", [(0, 0, 0), (2, -1, 2), (-1, 1, 0), (0, 1, -3), (1.5, 1, 0), (0, True, 0)])
def test_bad_configuration(s, E, b):
    with pytest.raises(ConfigurationError):
        Cache(s, E, b)


def test_construction_layout():
    cache = Cache(3, 2, 5)
    assert cache.num_sets == 8
    assert len(cache.sets) == 8
    assert all(len(s.lines) == 2 for s in cache.sets)
    assert all(not line.valid and line.tag == 0 and line.recency == 0
               for s in cache.sets for line in s.lines)
    stats = cache.stats()
    assert stats["capacity_bytes"] == 8 * 2 * 32
    assert stats["used_lines"] == 0


def test_lru_evicts_least_recent():
    cache = Cache(0, 2, 0)
    assert cache.access(0, 0xA) is MISS
    assert cache.access(0, 0xB) is MISS
    assert cache.access(0, 0xA) is HIT
    assert cache.access(0, 0xC) is EVICT
    assert sorted(cache.sets[0].valid_tags()) == [0xA, 0xC]
    assert cache.access(0, 0xA) is HIT
    assert cache.access(0, 0xB) is EVICT


def test_empty_lines_fill_lowest_index_first():
    cache = Cache(0, 4, 0)
    for tag in (7, 8, 9):
        cache.access(0, tag)
    lines = cache.sets[0].lines
    assert [line.tag for line in lines[:3]] == [7, 8, 9]
    assert not lines[3].valid


def test_capacity_and_no_duplicate_tags():
    cache = Cache(0, 4, 0)
    for tag in range(10):
        cache.access(0, tag)
        cache.access(0, tag)
        valid = cache.sets[0].valid_tags()
        assert len(valid) == min(tag + 1, 4)
        assert len(set(valid)) == len(valid)
    assert sorted(cache.sets[0].valid_tags()) == [6, 7, 8, 9]


def test_recency_strictly_increases():
    cache = Cache(0, 3, 0)
    for tag in (1, 2, 1, 3, 4, 2, 2):
        cache.access(0, tag)
    cset = cache.sets[0]
    assert cset.clock == 7
    recencies = [line.recency for line in cset.lines]
    assert len(set(recencies)) == 3
    assert max(recencies) == cset.clock


def test_sets_are_independent():
    cache = Cache(1, 1, 0)
    assert cache.access(0, 5) is MISS
    assert cache.access(1, 5) is MISS
    assert cache.access(0, 5) is HIT
    assert cache.sets[1].clock == 1


def test_decoded_addresses_single_line():
    cache = Cache(0, 1, 0)
    assert [cache.access(*cache.decode(a)) for a in (0x0, 0x1, 0x0)] == [MISS, EVICT, EVICT]


def test_set_index_out_of_range():
    cache = Cache(2, 1, 0)
    with pytest.raises(IndexError):
        cache.access(4, 0)
    with pytest.raises(IndexError):
        cache.access(-1, 0)


def test_close_is_idempotent_and_blocks_use():
    cache = Cache(1, 1, 1)
    cache.close()
    cache.close()
    assert cache.closed
    with pytest.raises(ValueError):
        cache.access(0, 0)


def test_context_manager_releases_on_error():
    with pytest.raises(RuntimeError):
        with Cache(1, 2, 0) as cache:
            cache.access(0, 1)
            raise RuntimeError("abort")
    assert cache.closed
