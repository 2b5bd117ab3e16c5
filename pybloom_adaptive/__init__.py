"""Fixed and adaptive Bloom filters backed by bitarray and xxHash."""
from pybloom_adaptive.pybloom import (
    AdaptiveBloomFilter,
    BloomFilter,
    ConstructionError,
    false_positive_probability,
    make_bitarray,
    make_hashfuncs,
    seeded_hash,
)

__all__ = [
    "AdaptiveBloomFilter",
    "BloomFilter",
    "ConstructionError",
    "false_positive_probability",
    "make_bitarray",
    "make_hashfuncs",
    "seeded_hash",
]
